"""Analytics sinks -- where finished tasks and reports are handed off.

All sinks implement :class:`AnalyticsSink`, mirroring the call surface of
the game's analytics manager.  The core treats every sink call as
best-effort: exceptions raised here are logged by the caller and never
reach the game.

- **BufferedSink**: stages the calls of one report cycle and turns each
  ``submit_report`` into a :class:`ReportEnvelope`.
- **InMemorySink**: keeps envelopes in a list (tests, demos).
- **JsonlReportSink**: appends one JSON line per envelope to a file.
- **LoggingSink**: logs every call and stores nothing.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from brainmatch_analytics.models import Report, ReportEnvelope, TaskRecord

logger = logging.getLogger(__name__)


class AnalyticsSink(ABC):
    """External analytics receiver (transport unspecified)."""

    @abstractmethod
    def initialize(self, app_name: str, session_id: str) -> None:
        """Bind the sink to an application and analytics session."""

    @abstractmethod
    def start_level(self, level_id: str) -> None:
        """A level run has started."""

    @abstractmethod
    def record_task(
        self,
        level_id: str,
        task_id: str,
        label: str,
        expected: str,
        actual: str,
        time_taken_ms: int,
        xp_earned: int,
    ) -> None:
        """Record one match attempt."""

    @abstractmethod
    def end_level(
        self,
        level_id: str,
        success: bool,
        duration_ms: int,
        xp: int,
    ) -> None:
        """Stage the outcome of the current level run."""

    @abstractmethod
    def add_raw_metric(self, key: str, value: str) -> None:
        """Attach a free-form metric to the staged report."""

    @abstractmethod
    def submit_report(self) -> None:
        """Submit the staged report."""


# =====================================================================
# BufferedSink
# =====================================================================

class BufferedSink(AnalyticsSink):
    """Collects one report cycle in memory and emits it as an envelope.

    Subclasses implement :meth:`_deliver`.
    """

    def __init__(self) -> None:
        self.app_name = ""
        self.session_id = ""
        self._tasks: list[TaskRecord] = []
        self._pending: dict[str, object] | None = None
        self._metrics: dict[str, str] = {}

    def initialize(self, app_name: str, session_id: str) -> None:
        self.app_name = app_name
        self.session_id = session_id

    def start_level(self, level_id: str) -> None:
        self._tasks = []
        self._pending = None
        self._metrics = {}

    def record_task(
        self,
        level_id: str,
        task_id: str,
        label: str,
        expected: str,
        actual: str,
        time_taken_ms: int,
        xp_earned: int,
    ) -> None:
        self._tasks.append(TaskRecord(
            level_id=level_id,
            task_id=task_id,
            label=label,
            expected=expected,
            actual=actual,
            time_taken_ms=time_taken_ms,
            xp_earned=xp_earned,
        ))

    def end_level(
        self,
        level_id: str,
        success: bool,
        duration_ms: int,
        xp: int,
    ) -> None:
        self._pending = {
            "level_id": level_id,
            "success": success,
            "duration_ms": duration_ms,
            "xp": xp,
        }

    def add_raw_metric(self, key: str, value: str) -> None:
        self._metrics[key] = value

    def submit_report(self) -> None:
        if self._pending is None:
            raise RuntimeError("submit_report() called before end_level()")
        report = Report(**self._pending, metrics=dict(self._metrics))
        envelope = ReportEnvelope(
            app_name=self.app_name,
            session_id=self.session_id,
            report=report,
            tasks=[t for t in self._tasks if t.level_id == report.level_id],
            submitted_at=datetime.now(timezone.utc).isoformat(),
        )
        self._tasks = []
        self._pending = None
        self._metrics = {}
        self._deliver(envelope)

    @abstractmethod
    def _deliver(self, envelope: ReportEnvelope) -> None:
        """Ship a finished envelope."""


class InMemorySink(BufferedSink):
    """Keeps every submitted envelope in :attr:`envelopes`."""

    def __init__(self) -> None:
        super().__init__()
        self.envelopes: list[ReportEnvelope] = []
        self.started_levels: list[str] = []

    def start_level(self, level_id: str) -> None:
        super().start_level(level_id)
        self.started_levels.append(level_id)

    @property
    def reports(self) -> list[Report]:
        return [e.report for e in self.envelopes]

    def _deliver(self, envelope: ReportEnvelope) -> None:
        self.envelopes.append(envelope)


class JsonlReportSink(BufferedSink):
    """Appends each envelope as one JSON line to *path*.

    Parameters
    ----------
    path:
        Output file; parent directories are created on first write.
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)

    def _deliver(self, envelope: ReportEnvelope) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(envelope.model_dump(), ensure_ascii=False) + "\n")


def load_envelopes(path: Path) -> list[ReportEnvelope]:
    """Read back every envelope written by :class:`JsonlReportSink`."""
    path = Path(path)
    if not path.exists():
        return []
    envelopes: list[ReportEnvelope] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            envelopes.append(ReportEnvelope.model_validate(json.loads(line)))
    return envelopes


# =====================================================================
# LoggingSink
# =====================================================================

class LoggingSink(AnalyticsSink):
    """Logs every sink call at INFO level."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def initialize(self, app_name: str, session_id: str) -> None:
        self._log.info("initialize app=%s session=%s", app_name, session_id)

    def start_level(self, level_id: str) -> None:
        self._log.info("start_level %s", level_id)

    def record_task(
        self,
        level_id: str,
        task_id: str,
        label: str,
        expected: str,
        actual: str,
        time_taken_ms: int,
        xp_earned: int,
    ) -> None:
        self._log.info(
            "record_task %s/%s %r expected=%s actual=%s time=%dms xp=%d",
            level_id, task_id, label, expected, actual, time_taken_ms, xp_earned,
        )

    def end_level(
        self,
        level_id: str,
        success: bool,
        duration_ms: int,
        xp: int,
    ) -> None:
        self._log.info(
            "end_level %s success=%s duration=%dms xp=%d",
            level_id, success, duration_ms, xp,
        )

    def add_raw_metric(self, key: str, value: str) -> None:
        self._log.info("add_raw_metric %s=%s", key, value)

    def submit_report(self) -> None:
        self._log.info("submit_report")
