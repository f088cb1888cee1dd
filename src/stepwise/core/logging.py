"""
Stepwise logging - structured logging with structlog.

Every module obtains its logger through :func:`get_logger` and logs
snake_case events with keyword fields:

    logger = get_logger(__name__)
    logger.info("stepper_run_completed", steps=3, errors=0, total_ms=1.42)

Run- and step-scoped identifiers (``run_id``, ``step``, ``step_index``) are
bound through structlog's contextvars, so nested logs carry them without
explicit parameter passing.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True)
            ↓
        structlog processor chain:
          1. merge_contextvars        (run_id, step, ...)
          2. add_log_level          (logger_name bound by get_logger)
          3. TimeStamper (ISO, UTC)
          4. add_service_metadata     (service.name)
          5. JSONRenderer | ConsoleRenderer

Defaults come from :class:`~stepwise.core.settings.StepwiseSettings`
(``STEPWISE_LOG_LEVEL``, ``STEPWISE_LOG_FORMAT``), explicit arguments win.

Tags:
    logging, structlog, observability, json-logging, stepwise

Doc-Types:
    - API Reference
    - Observability Guide
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from stepwise.core.errors import ConfigError
from stepwise.core.settings import LOG_LEVELS, get_settings

_SERVICE_NAME = "stepwise"


def _add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str | None = None,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: True for JSON, False for console, None to use settings
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs

    Raises:
        ConfigError: If ``level`` is not a known level name.
    """
    global _SERVICE_NAME

    settings = get_settings()
    log_level = (level or settings.log_level).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level: {level!r}").with_context(setting="log_level")
    if json_format is None:
        json_format = settings.log_format == "json"
    _SERVICE_NAME = service or settings.service_name

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level),
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    if name is None:
        return structlog.get_logger()
    # PrintLogger drops factory args, so carry the name as a bound value
    return structlog.get_logger(name, logger_name=name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    On exit every key goes back to the value it had on entry, so a binding
    made by the caller (or an enclosing LogContext) survives.

    Example:
        with LogContext(run_id="abc123"):
            logger.info("step_started")
        # run_id unbound here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        self._tokens = dict(structlog.contextvars.bind_contextvars(**self._context))
        return self

    def __exit__(self, *args) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
        self._tokens = {}


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
