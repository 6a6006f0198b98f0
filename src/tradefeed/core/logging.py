"""
Structured logging for tradefeed.

Provides a single entry point for configuring structlog plus helpers for
run-scoped context propagated through contextvars.

Configuration is read from arguments or environment variables:
- TRADEFEED_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: INFO)
- TRADEFEED_LOG_FORMAT: json | console (default: console)

Usage:
    from tradefeed.core.logging import configure_logging, get_logger, LogContext

    configure_logging(level="DEBUG")
    log = get_logger(__name__)

    with LogContext(feed="SAMPLE.dat", run_id="abc123"):
        log.info("feed_loaded", lines=42)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "tradefeed"

# Track if logging has been configured
_configured = False


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    """Resolve sys.stderr per logger so redirected streams are honoured."""
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | str | None = None,
    format: Literal["json", "console"] | str | None = None,
    stream: Any = None,
    force: bool = False,
) -> None:
    """
    Configure structured logging for the application.

    Should be called once at startup (CLI entry). Subsequent calls are
    no-ops unless force=True.

    Args:
        level: Log level (overrides TRADEFEED_LOG_LEVEL)
        format: Output format (overrides TRADEFEED_LOG_FORMAT)
        stream: Where rendered lines go (default: stderr)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = (level or os.environ.get("TRADEFEED_LOG_LEVEL", "INFO")).upper()
    log_format = (format or os.environ.get("TRADEFEED_LOG_FORMAT", "console")).lower()
    level_num = getattr(logging, log_level, logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service_metadata,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=False,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream) if stream else _stderr_logger_factory,
        cache_logger_on_first_use=False,
    )

    _configured = True


def reset_logging() -> None:
    """Restore structlog defaults (for testing)."""
    global _configured
    structlog.reset_defaults()
    _configured = False


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually with ``__name__``)."""
    return structlog.get_logger(name)


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

    Example:
        with LogContext(feed="SAMPLE.dat", run_id="abc123"):
            log.info("step_started")
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "is_configured",
    "reset_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
