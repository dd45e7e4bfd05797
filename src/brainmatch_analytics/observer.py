"""AnalyticsObserver -- lifecycle handlers shared by hooks and events.

Whether the game is instrumented through hooks or announces its life
cycle through :class:`~brainmatch_analytics.events.LifecycleEvents`, the
same four handlers do the work.  Every handler is best-effort: it logs and
returns ``None`` rather than raising.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

from brainmatch_analytics.events import FailureReason
from brainmatch_analytics.hooks import best_effort

if TYPE_CHECKING:
    from brainmatch_analytics.core.context import InstrumentationContext
    from brainmatch_analytics.models import Report, TaskRecord

logger = logging.getLogger(__name__)


def _reason_value(reason: FailureReason | str) -> str:
    if isinstance(reason, FailureReason):
        return reason.value
    try:
        return FailureReason(reason).value
    except ValueError:
        return str(reason)


class AnalyticsObserver:
    """Translates lifecycle signals into tracker, recorder and report calls.

    Parameters
    ----------
    context:
        The instrumentation state the handlers operate on.
    """

    def __init__(self, context: InstrumentationContext) -> None:
        self.context = context

    @best_effort
    def level_started(self, level_id: str) -> None:
        ctx = self.context
        ctx.tracker.start(level_id)
        # New report cycle
        ctx.metrics.clear()
        try:
            ctx.sink.start_level(level_id)
        except Exception:
            logger.exception("Sink failed on start_level(%s)", level_id)
        logger.info("Started level %s", level_id)

    @best_effort
    def match_resolved(self, first: Any, second: Any, correct: bool) -> TaskRecord | None:
        return self.context.recorder.record(first, second, correct)

    @best_effort
    def level_completed(
        self,
        xp: int | None = 0,
        metrics: Mapping[str, Any] | None = None,
    ) -> Report | None:
        ctx = self.context
        ctx.tracker.end(True, xp)
        for key, value in (metrics or {}).items():
            ctx.metrics.set(key, value)
        return ctx.submitter.submit()

    @best_effort
    def level_failed(
        self,
        reason: FailureReason | str,
        metrics: Mapping[str, Any] | None = None,
    ) -> Report | None:
        ctx = self.context
        ctx.tracker.end(False, 0)
        ctx.metrics.set("reason", _reason_value(reason))
        for key, value in (metrics or {}).items():
            ctx.metrics.set(key, value)
        return ctx.submitter.submit()
