"""LevelTracker -- life cycle of the level currently being played.

The tracker is a two-state machine::

    IDLE --start()--> RUNNING --end()--> IDLE
    RUNNING --start()--> RUNNING   (last start wins, no abandonment report)

Nothing in here raises on misuse.  Calls that arrive in the wrong state are
logged as inconsistencies and answered with a neutral value, because the
host game must never see an instrumentation error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from brainmatch_analytics.core.clock import Clock, now_ms

logger = logging.getLogger(__name__)

UNKNOWN_LEVEL_ID = "unknown"


def _coerce_xp(xp: Any) -> int:
    """Non-negative integer XP; missing or non-numeric values count as 0."""
    try:
        return max(0, int(xp))
    except (TypeError, ValueError):
        logger.warning("Unusable xp %r; reporting 0", xp)
        return 0


class LevelState(str, Enum):
    """Whether a level run is currently live."""

    IDLE = "IDLE"
    RUNNING = "RUNNING"


@dataclass
class LevelRun:
    """Mutable state of the live level run.

    Attributes
    ----------
    level_id:
        Identity of the level (e.g. ``"campaign_level_3"``).
    started_at:
        Epoch milliseconds of the start call.
    run_number:
        1-based counter of runs started on this tracker.
    task_count:
        Tasks recorded so far in this run.
    last_task_at:
        Timestamp of the most recent task (``started_at`` until one exists).
    """

    level_id: str
    started_at: int
    run_number: int
    task_count: int = 0
    last_task_at: int = 0


@dataclass(frozen=True)
class TaskSlot:
    """Sequence number and timing handed out for one recorded task."""

    level_id: str
    number: int
    time_taken_ms: int

    @property
    def task_id(self) -> str:
        return f"task_{self.number}"


@dataclass(frozen=True)
class LevelOutcome:
    """Report skeleton produced when a run ends.

    ``consistent`` is ``False`` when ``end`` was called without a live run;
    the duration is then forced to zero.
    """

    level_id: str
    run_number: int
    success: bool
    duration_ms: int
    xp: int
    consistent: bool = True


class LevelTracker:
    """Owns the current :class:`LevelRun` and derives its outcome.

    Parameters
    ----------
    clock:
        Millisecond clock used for start/end/task timestamps.
    """

    def __init__(self, clock: Clock = now_ms) -> None:
        self._clock = clock
        self._run: LevelRun | None = None
        self._runs_started = 0
        self._last_level_id = UNKNOWN_LEVEL_ID
        # Most recent outcome snapshot, read by the ReportSubmitter
        self.outcome: LevelOutcome | None = None

    # -- queries -------------------------------------------------------------

    @property
    def state(self) -> LevelState:
        return LevelState.RUNNING if self._run is not None else LevelState.IDLE

    @property
    def current(self) -> LevelRun | None:
        return self._run

    @property
    def run_number(self) -> int:
        """Number of the most recently started run (0 before any start)."""
        return self._runs_started

    # -- transitions ---------------------------------------------------------

    def start(self, level_id: str) -> LevelRun:
        """Begin a new run, discarding any run that never reached an outcome."""
        if self._run is not None:
            logger.info(
                "Level %s superseded by %s after %d task(s) without an outcome",
                self._run.level_id, level_id, self._run.task_count,
            )
        now = self._clock()
        self._runs_started += 1
        self._run = LevelRun(
            level_id=level_id,
            started_at=now,
            run_number=self._runs_started,
            last_task_at=now,
        )
        self._last_level_id = level_id
        self.outcome = None
        return self._run

    def record_task(self) -> TaskSlot | None:
        """Claim the next task number in the live run.

        Returns ``None`` (and logs) when no run is live.
        """
        run = self._run
        if run is None:
            logger.warning("Task recorded while no level is running; ignored")
            return None
        now = self._clock()
        run.task_count += 1
        slot = TaskSlot(
            level_id=run.level_id,
            number=run.task_count,
            time_taken_ms=max(0, now - run.last_task_at),
        )
        run.last_task_at = now
        return slot

    def end(self, success: bool, xp: Any = 0) -> LevelOutcome:
        """Close the live run and return its outcome skeleton.

        Without a live run the call is tolerated: a zero-duration outcome is
        returned for the last known level, carrying the last run number so a
        duplicate outcome signal for an already closed run is recognisable.
        """
        xp = _coerce_xp(xp)
        run = self._run
        if run is None:
            logger.warning(
                "Level outcome (success=%s) observed with no level running; "
                "reporting zero duration for %s",
                success, self._last_level_id,
            )
            self.outcome = LevelOutcome(
                level_id=self._last_level_id,
                run_number=self._runs_started,
                success=success,
                duration_ms=0,
                xp=xp,
                consistent=False,
            )
            return self.outcome

        duration = self._clock() - run.started_at
        if duration < 0:
            logger.warning(
                "Clock went backwards during %s (%d ms); clamping to 0",
                run.level_id, duration,
            )
            duration = 0
        self._run = None
        self.outcome = LevelOutcome(
            level_id=run.level_id,
            run_number=run.run_number,
            success=success,
            duration_ms=duration,
            xp=xp,
        )
        return self.outcome
