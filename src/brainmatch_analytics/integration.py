"""BrainMatchIntegration -- attaches analytics to a running BrainMatch game.

Two ways in:

- :meth:`BrainMatchIntegration.attach` hooks the game's own operations
  (``start_game``, ``handle_correct_match``, ``handle_campaign_win`` ...)
  without changing what they do;
- :meth:`BrainMatchIntegration.subscribe` listens to a host that raises
  :class:`~brainmatch_analytics.events.LifecycleEvent` signals itself.

Host state is read from ``host.game_state`` (``flipped_cards``,
``current_campaign_level``, ``turns``).  XP and stars come from the host's
optional ``calculate_xp``, ``calculate_campaign_stars`` and
``calculate_reflex_stars``; when absent they are reported as 0.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from brainmatch_analytics.config import AnalyticsSettings
from brainmatch_analytics.core.clock import Clock, IdProvider, new_session_id, now_ms
from brainmatch_analytics.core.context import InstrumentationContext
from brainmatch_analytics.events import FailureReason, LifecycleEvent, LifecycleEvents
from brainmatch_analytics.hooks import HookInstaller
from brainmatch_analytics.observer import AnalyticsObserver
from brainmatch_analytics.sink import AnalyticsSink

logger = logging.getLogger(__name__)

TRACKED_FEATURES = (
    "Campaign levels (start, win, fail)",
    "Reflex mode (start, complete)",
    "Card matches (correct and incorrect)",
    "Performance metrics (time, turns, XP, stars)",
)


def _game_state_attr(host: Any, name: str) -> Any:
    return getattr(getattr(host, "game_state", None), name, None)


def _call_optional(host: Any, name: str, *args: Any) -> int:
    """Call an optional host calculator, treating absence or failure as 0."""
    func = getattr(host, name, None)
    if not callable(func):
        return 0
    try:
        return max(0, int(func(*args)))
    except Exception:
        logger.exception("Host calculator %s failed; using 0", name)
        return 0


class BrainMatchIntegration:
    """Owns one analytics session and its attachment to a game.

    Parameters
    ----------
    sink:
        Receives tasks and reports.
    settings:
        Behaviour knobs; defaults to :class:`AnalyticsSettings`.
    clock:
        Millisecond clock (override for deterministic tests).
    id_provider:
        Session id source.
    """

    def __init__(
        self,
        sink: AnalyticsSink,
        settings: AnalyticsSettings | None = None,
        *,
        clock: Clock = now_ms,
        id_provider: IdProvider = new_session_id,
    ) -> None:
        self.settings = settings or AnalyticsSettings()
        self.context = InstrumentationContext(
            sink,
            clock=clock,
            id_provider=id_provider,
            unknown=self.settings.unknown_value,
        )
        self.observer = AnalyticsObserver(self.context)
        self._installer: HookInstaller | None = None
        self._notification_hooked = False
        self._initialized = False
        self._detached = False
        self._subscribed: list[LifecycleEvents] = []
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def session_id(self) -> str:
        return self.context.session.id

    @property
    def attached(self) -> bool:
        return self._installer is not None

    # ------------------------------------------------------------------
    # Attach / detach
    # ------------------------------------------------------------------

    def attach(self, host: Any) -> list[str]:
        """Hook the game's operations and return the names hooked.

        Calling ``attach`` again while attached is refused, since hooking a
        second time would chain wrappers and double every report.
        Attaching again after :meth:`detach` starts a fresh session.
        """
        if self._installer is not None:
            logger.warning("Analytics already attached; second attach ignored")
            return self._installer.installed

        if self._detached:
            self._detached = False
            self._initialized = False
            self.context.new_session()
        self._initialize_sink()
        installer = HookInstaller(host)
        self._installer = installer
        installer.install("start_game", self._on_start_game)
        installer.install("start_reflex_mode", self._on_start_reflex_mode)
        installer.install("handle_correct_match", self._on_correct_match)
        installer.install("handle_incorrect_match", self._on_incorrect_match)
        installer.install("handle_campaign_win", self._on_campaign_win)
        installer.install("handle_reflex_mode_end", self._on_reflex_mode_end)
        # The notification hook is added lazily, once the first timer starts
        installer.install("start_timer", self._on_start_timer, after=True)

        logger.info("Analytics attached (session %s), tracking:", self.session_id)
        for feature in TRACKED_FEATURES:
            logger.info("  - %s", feature)
        return installer.installed

    def detach(self) -> None:
        """Restore every hooked operation on the game."""
        if self._installer is None:
            return
        self._installer.uninstall_all()
        self._installer = None
        self._notification_hooked = False
        self._detached = True
        logger.info("Analytics detached (session %s)", self.session_id)

    def subscribe(self, events: LifecycleEvents) -> None:
        """Observe a host that emits lifecycle events instead of being hooked."""
        if any(subscribed is events for subscribed in self._subscribed):
            logger.warning("Already subscribed to %r; second subscribe ignored", events)
            return
        self._subscribed.append(events)
        self._initialize_sink()
        observer = self.observer
        self._unsubscribers.extend([
            events.subscribe(LifecycleEvent.LEVEL_STARTED, observer.level_started),
            events.subscribe(LifecycleEvent.MATCH_RESOLVED, observer.match_resolved),
            events.subscribe(LifecycleEvent.LEVEL_COMPLETED, observer.level_completed),
            events.subscribe(LifecycleEvent.LEVEL_FAILED, observer.level_failed),
        ])

    def unsubscribe(self) -> None:
        while self._unsubscribers:
            self._unsubscribers.pop()()
        self._subscribed.clear()

    def _initialize_sink(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        try:
            self.context.sink.initialize(self.settings.app_name, self.session_id)
        except Exception:
            logger.exception("Sink initialize failed")

    # ------------------------------------------------------------------
    # Hook logic -- each receives the host followed by the call's arguments
    # ------------------------------------------------------------------

    def _on_start_game(self, host: Any, level: Any, *args: Any, **kwargs: Any) -> None:
        self.observer.level_started(f"{self.settings.campaign_level_prefix}{level}")

    def _on_start_reflex_mode(self, host: Any, *args: Any, **kwargs: Any) -> None:
        self.observer.level_started(self.settings.reflex_level_id)

    def _on_correct_match(self, host: Any, *args: Any, **kwargs: Any) -> None:
        pair = self._flipped_pair(host)
        if pair is not None:
            self.observer.match_resolved(pair[0], pair[1], True)

    def _on_incorrect_match(self, host: Any, *args: Any, **kwargs: Any) -> None:
        pair = self._flipped_pair(host)
        if pair is not None:
            self.observer.match_resolved(pair[0], pair[1], False)

    def _on_campaign_win(self, host: Any, *args: Any, **kwargs: Any) -> None:
        level = _game_state_attr(host, "current_campaign_level")
        turns = _game_state_attr(host, "turns")
        xp = _call_optional(host, "calculate_xp", level, turns)
        stars = _call_optional(host, "calculate_campaign_stars", level, turns)
        self.observer.level_completed(xp, {
            "level": self._text(level),
            "turns": self._text(turns),
            "xp_earned": xp,
            "stars": stars,
            "mode": "campaign",
        })

    def _on_reflex_mode_end(self, host: Any, *args: Any, **kwargs: Any) -> None:
        turns = _game_state_attr(host, "turns")
        stars = _call_optional(host, "calculate_reflex_stars", turns)
        # Reflex mode awards no XP
        self.observer.level_completed(0, {
            "moves": self._text(turns),
            "stars": stars,
            "mode": "reflex",
        })

    def _on_start_timer(self, host: Any, *args: Any, **kwargs: Any) -> None:
        if self._notification_hooked or self._installer is None:
            return
        self._notification_hooked = self._installer.install("alert", self._on_alert)

    def _on_alert(self, host: Any, message: Any = "", *args: Any, **kwargs: Any) -> None:
        if self.settings.timeout_marker not in str(message):
            return
        turns = _game_state_attr(host, "turns")
        report = self.observer.level_failed(FailureReason.TIMEOUT, {"turns": self._text(turns)})
        if report is not None:
            logger.info("Level failed: %s, reason: timeout", report.level_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _flipped_pair(self, host: Any) -> tuple[Any, Any] | None:
        cards = _game_state_attr(host, "flipped_cards")
        try:
            if cards is None or len(cards) != 2:
                logger.warning("Expected two flipped cards, found %r; match not recorded", cards)
                return None
            return cards[0], cards[1]
        except TypeError:
            logger.warning("Unreadable flipped cards %r; match not recorded", cards)
            return None

    def _text(self, value: Any) -> str:
        return self.settings.unknown_value if value is None else str(value)
