"""Settings for the analytics integration.

Resolution order, lowest to highest priority:

1. field defaults,
2. a JSON settings file (``load_settings(path)``),
3. ``BRAINMATCH_ANALYTICS_<FIELD>`` environment variables.

Invalid values fail at construction time, before anything is attached to
the game.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, field_validator

ENV_PREFIX = "BRAINMATCH_ANALYTICS_"

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"})


class AnalyticsSettings(BaseModel):
    """Tunable behaviour of :class:`BrainMatchIntegration`."""

    app_name: str = "BrainMatch"
    """Application name passed to ``sink.initialize``."""

    timeout_marker: str = "Time's Up"
    """Substring identifying the host's timeout notification."""

    campaign_level_prefix: str = "campaign_level_"
    """Campaign levels are reported as ``<prefix><level index>``."""

    reflex_level_id: str = "reflex_mode"
    unknown_value: str = "unknown"
    """Sentinel for missing flipped-item data."""

    report_path: Path | None = None
    """When set, scripts write submitted reports here as JSON lines."""

    log_level: str = "INFO"

    @field_validator("timeout_marker", "app_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in AnalyticsSettings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw.strip():
            overrides[name] = raw.strip()
    return overrides


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AnalyticsSettings:
    """Build settings from an optional JSON file plus environment overrides.

    Parameters
    ----------
    path:
        JSON object with any subset of the settings fields.  A missing file
        is treated as empty.
    environ:
        Environment mapping; defaults to ``os.environ``.
    """
    data: dict[str, Any] = {}
    if path is not None and Path(path).exists():
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Settings file {path} must contain a JSON object")
        data.update(payload)
    data.update(_env_overrides(os.environ if environ is None else environ))
    return AnalyticsSettings.model_validate(data)


def save_settings(settings: AnalyticsSettings, path: Path) -> None:
    """Write settings to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")


def configure_logging(level: str = "INFO") -> None:
    """Basic console logging for scripts; the library never calls this."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
