"""Reconnect backoff."""

from __future__ import annotations

import random
from collections.abc import Callable


def calculate_reconnect_backoff(
    attempt: int,
    *,
    base_seconds: float = 1.0,
    max_seconds: float = 30.0,
    rand_float: Callable[[], float] = random.random,
) -> float:
    """
    Delay before reconnect attempt `attempt` (0-based).

    Exponential in the attempt number with +/-20% jitter, capped at
    `max_seconds`.
    """
    if max_seconds <= 0.0 or base_seconds <= 0.0:
        return 0.0
    scaled = base_seconds * (2 ** min(max(attempt, 0), 32))
    jitter = 0.8 + 0.4 * min(max(rand_float(), 0.0), 1.0)
    return min(max_seconds, scaled * jitter)
