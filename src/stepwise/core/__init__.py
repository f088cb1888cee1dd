"""Core primitives shared by the stepper: timing, errors, settings, logging.

Architecture::

    stopclock.py     StopClock + summary snapshots
    errors.py        StepwiseError hierarchy + StepwiseWarning
    settings.py      StepwiseSettings (pydantic-settings) + get_settings()
    logging.py       structlog configuration + context binding
"""

from .errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    StepDefinitionError,
    StepwiseError,
    StepwiseWarning,
    describe_error,
)
from .settings import StepwiseSettings, get_settings
from .stopclock import Stop, StopClock, StopClockSummary, StopMatch, StopSummary

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "StepDefinitionError",
    "StepwiseError",
    "StepwiseWarning",
    "describe_error",
    "StepwiseSettings",
    "get_settings",
    "Stop",
    "StopClock",
    "StopClockSummary",
    "StopMatch",
    "StopSummary",
]
