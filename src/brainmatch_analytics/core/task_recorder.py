"""TaskRecorder -- turns one match attempt into a :class:`TaskRecord`.

Flipped items come from the host UI layer.  Their data is read leniently:
first from a ``dataset`` mapping (the DOM-style ``data-*`` attributes the
game exposes), then from plain attributes, then from item keys.  Anything
missing, empty or unreadable becomes the ``"unknown"`` sentinel.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from brainmatch_analytics.models import TaskRecord

if TYPE_CHECKING:
    from brainmatch_analytics.core.level_tracker import LevelTracker
    from brainmatch_analytics.sink import AnalyticsSink

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


def read_item_field(item: Any, key: str, default: str = UNKNOWN) -> str:
    """Read ``key`` from a flipped item, falling back to *default*."""
    if item is None:
        return default

    value: Any = None
    dataset = getattr(item, "dataset", None)
    if isinstance(dataset, Mapping):
        value = dataset.get(key)
    if value is None:
        value = getattr(item, key, None)
    if value is None and isinstance(item, Mapping):
        value = item.get(key)

    if value is None:
        return default
    try:
        text = str(value)
    except Exception:
        logger.exception("Unreadable %r on flipped item", key)
        return default
    return text or default


def derive_expected_actual(
    first: Any,
    second: Any,
    correct: bool,
    unknown: str = UNKNOWN,
) -> tuple[str, str]:
    """Return ``(expected, actual)`` for a match attempt.

    A correct match uses both observed values.  An incorrect one expects
    the first item's declared match target and observes the second value.
    """
    actual = read_item_field(second, "value", unknown)
    if correct:
        expected = read_item_field(first, "value", unknown)
    else:
        expected = read_item_field(first, "match", unknown)
    return expected, actual


class TaskRecorder:
    """Builds task records and forwards them to the analytics sink.

    Parameters
    ----------
    tracker:
        Supplies the level identity and the next task sequence number.
    sink:
        Receives each record via ``record_task``.
    unknown:
        Sentinel used for missing item data.
    """

    def __init__(
        self,
        tracker: LevelTracker,
        sink: AnalyticsSink,
        unknown: str = UNKNOWN,
    ) -> None:
        self.tracker = tracker
        self.sink = sink
        self.unknown = unknown

    def record(self, first: Any, second: Any, correct: bool) -> TaskRecord | None:
        """Record one match attempt.

        Returns the record, or ``None`` when no level is running.
        """
        slot = self.tracker.record_task()
        if slot is None:
            return None

        expected, actual = derive_expected_actual(first, second, correct, self.unknown)
        label_value = read_item_field(first, "value", self.unknown)
        record = TaskRecord(
            level_id=slot.level_id,
            task_id=slot.task_id,
            label=f"Match: {label_value}",
            expected=expected,
            actual=actual,
            time_taken_ms=slot.time_taken_ms,
            xp_earned=0,
        )

        try:
            self.sink.record_task(
                record.level_id,
                record.task_id,
                record.label,
                record.expected,
                record.actual,
                record.time_taken_ms,
                record.xp_earned,
            )
        except Exception:
            logger.exception("Sink rejected %s for %s", record.task_id, record.level_id)

        logger.debug(
            "Task %s recorded (%s match): expected=%s actual=%s",
            record.task_id, "correct" if correct else "incorrect",
            record.expected, record.actual,
        )
        return record
