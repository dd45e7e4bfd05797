"""Tests for AnalyticsSettings loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from brainmatch_analytics.config import AnalyticsSettings, load_settings, save_settings


class TestAnalyticsSettings:
    def test_defaults(self):
        s = AnalyticsSettings()
        assert s.app_name == "BrainMatch"
        assert s.timeout_marker == "Time's Up"
        assert s.campaign_level_prefix == "campaign_level_"
        assert s.reflex_level_id == "reflex_mode"
        assert s.unknown_value == "unknown"
        assert s.report_path is None

    def test_blank_marker_rejected(self):
        with pytest.raises(ValidationError):
            AnalyticsSettings(timeout_marker="  ")

    def test_log_level_normalised(self):
        assert AnalyticsSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            AnalyticsSettings(log_level="chatty")


class TestLoadSettings:
    def test_no_file_no_env(self):
        assert load_settings(None, environ={}) == AnalyticsSettings()

    def test_file_values(self, tmp_path):
        path = tmp_path / "analytics.json"
        path.write_text(json.dumps({"app_name": "BrainMatchDev", "report_path": "out.jsonl"}))
        s = load_settings(path, environ={})
        assert s.app_name == "BrainMatchDev"
        assert s.report_path == Path("out.jsonl")

    def test_env_overrides_file(self, tmp_path):
        path = tmp_path / "analytics.json"
        path.write_text(json.dumps({"timeout_marker": "From file"}))
        s = load_settings(path, environ={"BRAINMATCH_ANALYTICS_TIMEOUT_MARKER": "From env"})
        assert s.timeout_marker == "From env"

    def test_blank_env_ignored(self):
        s = load_settings(None, environ={"BRAINMATCH_ANALYTICS_APP_NAME": "  "})
        assert s.app_name == "BrainMatch"

    def test_missing_file_is_empty(self, tmp_path):
        assert load_settings(tmp_path / "missing.json", environ={}).app_name == "BrainMatch"

    def test_non_object_file_rejected(self, tmp_path):
        path = tmp_path / "analytics.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="JSON object"):
            load_settings(path, environ={})

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "analytics.json"
        save_settings(AnalyticsSettings(reflex_level_id="reflex"), path)
        assert load_settings(path, environ={}).reflex_level_id == "reflex"
