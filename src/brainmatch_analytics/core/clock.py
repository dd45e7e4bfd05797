"""Wall-clock and id sources used by the instrumentation core.

Both are plain callables so tests can substitute deterministic versions.
"""

from __future__ import annotations

import time
import uuid
from typing import Callable

Clock = Callable[[], int]
"""Returns the current time in epoch milliseconds."""

IdProvider = Callable[[int], str]
"""Given the creation timestamp, returns a unique session id."""


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_session_id(created_at: int) -> str:
    """Return ``session_<created_at>_<9 random chars>``."""
    return f"session_{created_at}_{uuid.uuid4().hex[:9]}"


class ManualClock:
    """Clock whose time only moves when told to.

    Parameters
    ----------
    start:
        Initial time in epoch milliseconds.
    """

    def __init__(self, start: int = 0) -> None:
        self._now = start

    def __call__(self) -> int:
        return self._now

    def advance(self, ms: int) -> int:
        """Move the clock forward by *ms* and return the new time."""
        if ms < 0:
            raise ValueError(f"cannot move a clock backwards, got {ms}")
        self._now += ms
        return self._now

    def __repr__(self) -> str:
        return f"ManualClock(now={self._now})"
