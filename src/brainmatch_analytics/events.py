"""Lifecycle events a host game can raise instead of being hooked.

A host that owns a :class:`LifecycleEvents` emitter announces level starts,
match resolutions, completions and failures explicitly; analytics
subscribes to them.  Handler errors are logged and swallowed so a faulty
subscriber can never break the game's own event turn.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class LifecycleEvent(str, Enum):
    """Game events that analytics can observe."""

    LEVEL_STARTED = "LEVEL_STARTED"
    """Payload: ``level_id``."""

    MATCH_RESOLVED = "MATCH_RESOLVED"
    """Payload: ``first``, ``second``, ``correct``."""

    LEVEL_COMPLETED = "LEVEL_COMPLETED"
    """Payload: ``xp`` and optional ``metrics`` mapping."""

    LEVEL_FAILED = "LEVEL_FAILED"
    """Payload: ``reason`` (a :class:`FailureReason`) and optional ``metrics``."""


class FailureReason(str, Enum):
    """Structured reasons a level can be lost."""

    TIMEOUT = "timeout"
    QUIT = "quit"


class LifecycleEvents:
    """Minimal synchronous event emitter.

    Handlers run in subscription order within the ``emit`` call.
    """

    def __init__(self) -> None:
        self._handlers: dict[LifecycleEvent, list[Handler]] = {e: [] for e in LifecycleEvent}

    def subscribe(self, event: LifecycleEvent, handler: Handler) -> Callable[[], None]:
        """Register *handler* for *event* and return an unsubscribe callable."""
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            try:
                self._handlers[event].remove(handler)
            except ValueError:
                pass

        return unsubscribe

    def handler_count(self, event: LifecycleEvent) -> int:
        return len(self._handlers[event])

    def emit(self, event: LifecycleEvent, **payload: Any) -> None:
        """Deliver *payload* to every handler subscribed to *event*."""
        # Snapshot so handlers may unsubscribe while being called
        for handler in list(self._handlers[event]):
            try:
                handler(**payload)
            except Exception:
                logger.exception("Handler %r failed for %s", handler, event.value)
