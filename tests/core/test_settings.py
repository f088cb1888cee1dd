"""Tests for stepwise.core.settings.

Covers:
- StepwiseSettings defaults
- STEPWISE_* environment overrides and .env files
- log_level validation
- get_settings() caching
"""

import pytest
from pydantic import ValidationError

from stepwise.core.settings import StepwiseSettings, clear_settings_cache, get_settings


class TestStepwiseSettingsDefaults:
    def test_defaults(self):
        s = StepwiseSettings()
        assert s.log_level == "INFO"
        assert s.log_format == "console"
        assert s.log_steps is True
        assert s.service_name == "stepwise"


class TestStepwiseSettingsEnvOverride:
    def test_log_level_from_env_is_uppercased(self, monkeypatch):
        monkeypatch.setenv("STEPWISE_LOG_LEVEL", "debug")
        assert StepwiseSettings().log_level == "DEBUG"

    def test_log_steps_from_env(self, monkeypatch):
        monkeypatch.setenv("STEPWISE_LOG_STEPS", "false")
        assert StepwiseSettings().log_steps is False

    def test_unprefixed_vars_are_ignored(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert StepwiseSettings().log_level == "INFO"

    def test_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("STEPWISE_LOG_FORMAT=json\n")
        assert StepwiseSettings().log_format == "json"


class TestStepwiseSettingsValidation:
    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError):
            StepwiseSettings(log_level="LOUD")

    def test_unknown_format_rejected(self):
        with pytest.raises(ValidationError):
            StepwiseSettings(log_format="xml")


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload_rereads_env(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("STEPWISE_LOG_LEVEL", "WARNING")
        assert get_settings().log_level == "INFO"

        reloaded = get_settings(_force_reload=True)

        assert reloaded is not first
        assert reloaded.log_level == "WARNING"

    def test_clear_cache(self):
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
