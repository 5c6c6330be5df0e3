"""
Pattern evaluators.

The real evaluator (Strudel's scheduler) lives outside this package; it
only has to provide `evaluate(source_text)` and `stop()`.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class PatternEvaluator(Protocol):
    """Anything that can play and silence pattern programs."""

    def evaluate(self, source_text: str) -> None: ...

    def stop(self) -> None: ...


class LoggingEvaluator:
    """
    Evaluator for headless players.

    Records what it was asked to do and logs it, without producing sound.
    """

    def __init__(self) -> None:
        self.history: list[str | None] = []
        self.current: str | None = None

    @property
    def playing(self) -> bool:
        return self.current is not None

    def evaluate(self, source_text: str) -> None:
        logger.info("evaluate: %s", source_text)
        self.current = source_text
        self.history.append(source_text)

    def stop(self) -> None:
        logger.info("stop")
        self.current = None
        self.history.append(None)
