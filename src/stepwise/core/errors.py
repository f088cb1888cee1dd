"""
Structured error types for stepwise.

Step failures are never wrapped: the engine stores the exact exception a
guard or work function raised, so callers can ``isinstance`` against their
own types.  The classes here cover the library's *own* failure surface:
invalid step definitions, bad configuration, and advisory diagnostics.

Manifesto:
    - **Typed hierarchy:** One base class, one subclass per failure domain
    - **Rich context:** Errors carry the step/run they relate to
    - **Error chaining:** Preserve the original exception as ``cause``
    - **Advisory misuse:** Construction-time misuse warns, it does not raise

Architecture:
    ::

        ┌──────────────────────────────────────────────────────┐
        │                    StepwiseError                      │
        │             (category, context, cause)                │
        ├──────────────────────────────────────────────────────┤
        │  ConfigError            StepDefinitionError           │
        │  (CONFIG)               (VALIDATION)                  │
        └──────────────────────────────────────────────────────┘

        StepwiseWarning (UserWarning) ── advisory diagnostics only

Examples:
    >>> error = StepDefinitionError("guard must be callable")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.with_context(step="load").context.step
    'load'

Tags:
    error-handling, exception-hierarchy, error-context, stepwise

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    CONFIG = "CONFIG"  # Missing config, invalid settings
    VALIDATION = "VALIDATION"  # Malformed step definitions
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a :class:`StepwiseError`.

    Attributes:
        step: Name of the step the error relates to
        step_index: Position of the step in the engine's list
        run_id: Identifier of the run in progress, if any
        setting: Name of the offending setting for config errors
        metadata: Additional key-value pairs
    """

    step: str | None = None
    step_index: int | None = None
    run_id: str | None = None
    setting: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["step", "step_index", "run_id", "setting"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class StepwiseError(Exception):
    """
    Base exception for all stepwise errors.

    Subclasses set ``default_category`` to classify themselves.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> StepwiseError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StepDefinitionError("work must be callable").with_context(step="load")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class ConfigError(StepwiseError):
    """Invalid or unusable configuration value."""

    default_category = ErrorCategory.CONFIG


class StepDefinitionError(StepwiseError):
    """A step was defined with a non-callable guard or work function."""

    default_category = ErrorCategory.VALIDATION


class StepwiseWarning(UserWarning):
    """Advisory diagnostic for tolerated misuse of the public API."""


def describe_error(error: BaseException) -> dict[str, Any]:
    """
    Summarize an exception for structured logs.

    Unlike ``traceback.format_exc()`` this works outside the ``except``
    block, using the traceback stored on the exception itself.
    """
    return {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "error_stack": "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ),
    }


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "StepwiseError",
    "ConfigError",
    "StepDefinitionError",
    "StepwiseWarning",
    "describe_error",
]
