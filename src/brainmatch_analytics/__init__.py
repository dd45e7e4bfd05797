"""Non-invasive analytics instrumentation for the BrainMatch card-matching game.

Attach to a running game with::

    from brainmatch_analytics import BrainMatchIntegration, InMemorySink

    analytics = BrainMatchIntegration(InMemorySink())
    analytics.attach(game)
"""

from brainmatch_analytics.config import AnalyticsSettings, load_settings
from brainmatch_analytics.events import FailureReason, LifecycleEvent, LifecycleEvents
from brainmatch_analytics.hooks import HookInstaller, best_effort
from brainmatch_analytics.integration import BrainMatchIntegration
from brainmatch_analytics.models import Report, ReportEnvelope, Session, TaskRecord
from brainmatch_analytics.observer import AnalyticsObserver
from brainmatch_analytics.sink import (
    AnalyticsSink,
    BufferedSink,
    InMemorySink,
    JsonlReportSink,
    LoggingSink,
    load_envelopes,
)

__all__ = [
    "AnalyticsObserver",
    "AnalyticsSettings",
    "AnalyticsSink",
    "BrainMatchIntegration",
    "BufferedSink",
    "FailureReason",
    "HookInstaller",
    "InMemorySink",
    "JsonlReportSink",
    "LifecycleEvent",
    "LifecycleEvents",
    "LoggingSink",
    "Report",
    "ReportEnvelope",
    "Session",
    "TaskRecord",
    "best_effort",
    "load_envelopes",
    "load_settings",
]
