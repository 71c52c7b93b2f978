"""
Utilities

Small helpers shared by the services: the system clock, the bounded
settle wait and local tool discovery.
"""

import shutil
import time
from typing import Callable, Optional

from hostdeploy.constants import (
    SETTLE_CEILING_SECONDS,
    SETTLE_INITIAL_DELAY_SECONDS,
)


class SystemClock:
    """Real clock backed by the time module."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


def settle(
    predicate: Callable[[], bool],
    clock,
    ceiling: float = SETTLE_CEILING_SECONDS,
    initial_delay: float = SETTLE_INITIAL_DELAY_SECONDS,
) -> bool:
    """
    Give a freshly started workload the full settle interval, observing it
    with exponential backoff along the way.

    The outcome is the observation taken once the ceiling has elapsed, so
    the caller never moves on before the interval is over. A workload that
    was seen running and then stops ends the wait early.

    Returns:
        True if predicate holds at the end of the interval
    """
    start = clock.monotonic()
    delay = initial_delay
    seen_running = False

    while True:
        remaining = ceiling - (clock.monotonic() - start)
        if remaining > 0:
            clock.sleep(min(delay, remaining))
            delay *= 2

        running = predicate()
        if clock.monotonic() - start >= ceiling:
            return running
        if seen_running and not running:
            return False
        seen_running = seen_running or running


def find_tool(tool_name: str) -> Optional[str]:
    """Return the absolute path of a local executable, or None."""
    return shutil.which(tool_name)
