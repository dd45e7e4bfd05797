"""Hook-and-aggregate core: level tracking, task records, metrics, reports."""

from brainmatch_analytics.core.clock import ManualClock, new_session_id, now_ms
from brainmatch_analytics.core.context import InstrumentationContext, create_session
from brainmatch_analytics.core.level_tracker import (
    LevelOutcome,
    LevelRun,
    LevelState,
    LevelTracker,
    TaskSlot,
)
from brainmatch_analytics.core.metrics import MetricAggregator
from brainmatch_analytics.core.report_submitter import ReportSubmitter
from brainmatch_analytics.core.task_recorder import (
    TaskRecorder,
    derive_expected_actual,
    read_item_field,
)

__all__ = [
    # clock
    "ManualClock",
    "new_session_id",
    "now_ms",
    # context
    "InstrumentationContext",
    "create_session",
    # level_tracker
    "LevelOutcome",
    "LevelRun",
    "LevelState",
    "LevelTracker",
    "TaskSlot",
    # metrics
    "MetricAggregator",
    # report_submitter
    "ReportSubmitter",
    # task_recorder
    "TaskRecorder",
    "derive_expected_actual",
    "read_item_field",
]
