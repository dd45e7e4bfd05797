"""ReportSubmitter -- hands exactly one finalized report per outcome to the sink."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from brainmatch_analytics.models import Report

if TYPE_CHECKING:
    from brainmatch_analytics.core.level_tracker import LevelTracker
    from brainmatch_analytics.core.metrics import MetricAggregator
    from brainmatch_analytics.sink import AnalyticsSink

logger = logging.getLogger(__name__)


class ReportSubmitter:
    """Merges the tracker's outcome with the current metrics and submits it.

    Each level run can be submitted once.  The guard is keyed on the
    tracker's run number, so it resets whenever ``LevelTracker.start`` opens
    a new run.  Metrics are cleared after every submission attempt so they
    never leak into the next report.

    Parameters
    ----------
    tracker:
        Source of the outcome snapshot.
    metrics:
        Raw metrics for the current report cycle.
    sink:
        External analytics sink.
    """

    def __init__(
        self,
        tracker: LevelTracker,
        metrics: MetricAggregator,
        sink: AnalyticsSink,
    ) -> None:
        self.tracker = tracker
        self.metrics = metrics
        self.sink = sink
        self._submitted_run: int | None = None

    @property
    def already_submitted(self) -> bool:
        """True when the current run's report has been handed off."""
        return self._submitted_run == self.tracker.run_number

    def submit(self) -> Report | None:
        """Assemble and hand off the report for the latest outcome.

        Returns the submitted report, or ``None`` when there is no outcome
        to report or it was already submitted.
        """
        outcome = self.tracker.outcome
        if outcome is None:
            logger.warning("submit() called before any level outcome; nothing to report")
            self.metrics.clear()
            return None
        if self._submitted_run == outcome.run_number:
            logger.warning(
                "Duplicate outcome for %s (run %d) suppressed",
                outcome.level_id, outcome.run_number,
            )
            self.metrics.clear()
            return None

        if not outcome.consistent:
            logger.warning(
                "Reporting %s without a matching level start; duration forced to 0",
                outcome.level_id,
            )
        report = Report(
            level_id=outcome.level_id,
            success=outcome.success,
            duration_ms=outcome.duration_ms,
            xp=outcome.xp,
            metrics=self.metrics.snapshot(),
        )
        self._submitted_run = outcome.run_number
        self.metrics.clear()

        try:
            self.sink.end_level(
                report.level_id, report.success, report.duration_ms, report.xp,
            )
            for key, value in report.metrics.items():
                self.sink.add_raw_metric(key, value)
            self.sink.submit_report()
        except Exception:
            logger.exception("Sink failed while submitting report for %s", report.level_id)

        logger.info(
            "Report submitted: %s success=%s duration=%dms xp=%d",
            report.level_id, report.success, report.duration_ms, report.xp,
        )
        return report
