"""Tests for AnalyticsObserver and the InstrumentationContext it drives."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

from brainmatch_analytics.core.clock import ManualClock
from brainmatch_analytics.core.context import InstrumentationContext, create_session
from brainmatch_analytics.events import FailureReason
from brainmatch_analytics.observer import AnalyticsObserver


def _make_observer() -> tuple[AnalyticsObserver, MagicMock, ManualClock]:
    clock = ManualClock(5_000)
    sink = MagicMock()
    ctx = InstrumentationContext(sink, clock=clock, id_provider=lambda ts: f"s{ts}")
    return AnalyticsObserver(ctx), sink, clock


def _card(value: str, match: str | None = None) -> SimpleNamespace:
    data = {"value": value}
    if match is not None:
        data["match"] = match
    return SimpleNamespace(dataset=data)


class TestCreateSession:
    def test_uses_clock_and_provider(self):
        session = create_session(lambda: 99, lambda ts: f"id-{ts}")
        assert session.id == "id-99"
        assert session.created_at == 99


class TestAnalyticsObserver:
    def test_level_started_notifies_sink_and_clears_metrics(self):
        observer, sink, _ = _make_observer()
        observer.context.metrics.set("stale", 1)
        observer.level_started("campaign_level_4")
        sink.start_level.assert_called_once_with("campaign_level_4")
        assert len(observer.context.metrics) == 0

    def test_match_resolved_returns_record(self):
        observer, _, _ = _make_observer()
        observer.level_started("L1")
        record = observer.match_resolved(_card("x", match="y"), _card("z"), False)
        assert (record.expected, record.actual) == ("y", "z")

    def test_level_completed(self):
        observer, _, clock = _make_observer()
        observer.level_started("L1")
        clock.advance(700)
        report = observer.level_completed(30, {"mode": "campaign"})
        assert report.success is True
        assert report.duration_ms == 700
        assert report.metrics == {"mode": "campaign"}

    def test_level_failed_reason_first(self):
        observer, _, _ = _make_observer()
        observer.level_started("L1")
        report = observer.level_failed(FailureReason.TIMEOUT, {"turns": 3})
        assert list(report.metrics.items()) == [("reason", "timeout"), ("turns", "3")]
        assert report.xp == 0

    def test_free_form_reason_string(self):
        observer, _, _ = _make_observer()
        observer.level_started("L1")
        assert observer.level_failed("timeout").metrics["reason"] == "timeout"
        observer.level_started("L2")
        assert observer.level_failed("crashed").metrics["reason"] == "crashed"

    def test_handler_errors_are_swallowed(self):
        observer, _, _ = _make_observer()
        observer.context.tracker = None  # type: ignore[assignment]
        assert observer.level_started("L1") is None
        assert observer.level_completed(1) is None
