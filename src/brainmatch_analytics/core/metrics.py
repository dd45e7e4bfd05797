"""Free-form string metrics scoped to one report cycle."""

from __future__ import annotations

from typing import Any, Iterator


class MetricAggregator:
    """Key-value accumulator for raw report metrics.

    ``set`` is last-write-wins (not additive) and every value is stored as a
    string.  Iteration follows insertion order so serialisation is stable.
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous value."""
        self._values[str(key)] = str(value)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._values.get(key, default)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the current metrics."""
        return dict(self._values)

    def clear(self) -> None:
        """Start a new report cycle."""
        self._values.clear()

    # -- dunder helpers ------------------------------------------------------

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._values.items()))

    def __repr__(self) -> str:
        return f"MetricAggregator({self._values!r})"
