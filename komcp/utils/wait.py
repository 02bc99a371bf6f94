"""Polling until a condition holds."""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Callable

logger = logging.getLogger(__name__)


def _seconds(duration: float | timedelta) -> float:
    return duration.total_seconds() if isinstance(duration, timedelta) else float(duration)


def wait_until(
    predicate: Callable[[], bool],
    interval: float | timedelta,
    timeout: float | timedelta,
) -> bool:
    """Call ``predicate`` every ``interval`` until it is true or ``timeout`` passes.

    The first check happens one interval after the start. Returns True once
    the predicate succeeds and False on timeout.
    """
    step = _seconds(interval)
    if step <= 0:
        raise ValueError("interval must be positive")
    start = time.monotonic()
    deadline = start + _seconds(timeout)
    next_tick = start + step

    while True:
        if next_tick >= deadline:
            remaining = deadline - time.monotonic()
            if remaining > 0:
                time.sleep(remaining)
            logger.debug("Timeout reached, stopping monitoring.")
            return False
        delay = next_tick - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        if predicate():
            logger.debug("Condition met, stopping monitoring.")
            return True
        logger.debug("Condition not met, retrying...")
        now = time.monotonic()
        next_tick = max(next_tick + step, now)