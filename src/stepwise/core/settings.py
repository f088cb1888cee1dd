"""Settings for stepwise.

Every knob stepwise reads from the environment lives here, validated once
by pydantic-settings and cached.  Fields map to ``STEPWISE_*`` environment
variables (``STEPWISE_LOG_LEVEL=DEBUG``) or a ``.env`` file.

Fields
──────
log_level     : Structlog level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
log_format    : ``json`` for log aggregation, ``console`` for development
log_steps     : Emit per-step lifecycle logs from the stepper
service_name  : ``service.name`` attached to every log entry

Examples:
    >>> from stepwise.core.settings import get_settings
    >>> get_settings().log_level
    'INFO'

Tags:
    settings, configuration, pydantic, environment, stepwise

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class StepwiseSettings(BaseSettings):
    """Stepwise configuration, resolved from ``STEPWISE_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="STEPWISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")
    log_steps: bool = Field(default=True, description="Log each step's lifecycle at DEBUG")
    service_name: str = Field(default="stepwise")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> str:
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level


# ── Settings factory with caching ────────────────────────────────────────

_settings: StepwiseSettings | None = None


def get_settings(*, _force_reload: bool = False) -> StepwiseSettings:
    """Load, validate, and cache a :class:`StepwiseSettings` instance.

    Parameters
    ----------
    _force_reload:
        Bypass the cache and re-read the environment.
    """
    global _settings

    if _settings is None or _force_reload:
        _settings = StepwiseSettings()
    return _settings


def clear_settings_cache() -> None:
    """Drop the cached settings (used by tests)."""
    global _settings
    _settings = None


__all__ = ["LOG_LEVELS", "StepwiseSettings", "get_settings", "clear_settings_cache"]
