"""InstrumentationContext -- the explicit home of all analytics state.

Instead of module-level globals, one context object owns the session, the
level tracker, the metric aggregator and the components built on them.
Handlers receive the context by reference, which keeps every piece unit
testable in isolation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from brainmatch_analytics.core.clock import Clock, IdProvider, new_session_id, now_ms
from brainmatch_analytics.core.level_tracker import LevelTracker
from brainmatch_analytics.core.metrics import MetricAggregator
from brainmatch_analytics.core.report_submitter import ReportSubmitter
from brainmatch_analytics.core.task_recorder import UNKNOWN, TaskRecorder
from brainmatch_analytics.models import Session

if TYPE_CHECKING:
    from brainmatch_analytics.sink import AnalyticsSink


def create_session(clock: Clock = now_ms, id_provider: IdProvider = new_session_id) -> Session:
    """Create the session for one attach."""
    created_at = clock()
    return Session(id=id_provider(created_at), created_at=created_at)


class InstrumentationContext:
    """Wires the core components around a single sink.

    Parameters
    ----------
    sink:
        External analytics sink.
    clock:
        Millisecond clock shared by every component.
    id_provider:
        Session id source.
    unknown:
        Sentinel for unreadable item data.
    """

    def __init__(
        self,
        sink: AnalyticsSink,
        *,
        clock: Clock = now_ms,
        id_provider: IdProvider = new_session_id,
        unknown: str = UNKNOWN,
    ) -> None:
        self.sink = sink
        self.clock = clock
        self._id_provider = id_provider
        self.session = create_session(clock, id_provider)
        self.tracker = LevelTracker(clock)
        self.metrics = MetricAggregator()
        self.recorder = TaskRecorder(self.tracker, sink, unknown=unknown)
        self.submitter = ReportSubmitter(self.tracker, self.metrics, sink)

    def new_session(self) -> Session:
        """Replace the session, e.g. when analytics is attached again."""
        self.session = create_session(self.clock, self._id_provider)
        return self.session
