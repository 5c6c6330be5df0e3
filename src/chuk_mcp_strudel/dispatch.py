"""
Dispatch adapter - the single choke point into the pattern evaluator.

Local triggers and remote frames both end up here, so once a command is
resolved nothing downstream can tell where it came from.
"""

from __future__ import annotations

import logging
import threading

from chuk_mcp_strudel.evaluators import PatternEvaluator
from chuk_mcp_strudel.models.command import Command, Evaluate, Stop

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Forwards commands to a pattern evaluator, one at a time.

    Calls are synchronous and unqueued. A lock serializes them so the
    evaluator sees a single writer even if commands arrive from threads.
    Evaluator exceptions propagate unchanged.
    """

    def __init__(self, evaluator: PatternEvaluator):
        self.evaluator = evaluator
        self._lock = threading.Lock()
        self.applied = 0

    def apply(self, command: Command) -> None:
        """Apply a command to the evaluator."""
        with self._lock:
            if isinstance(command, Evaluate):
                logger.debug("Evaluating %d chars", len(command.source_text))
                self.evaluator.evaluate(command.source_text)
            elif isinstance(command, Stop):
                logger.debug("Stopping all patterns")
                self.evaluator.stop()
            else:
                raise TypeError(f"Not a command: {command!r}")
            self.applied += 1
