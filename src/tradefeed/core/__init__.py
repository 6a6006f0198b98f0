"""
tradefeed.core - shared primitives: errors, findings, logging, timing, settings.
"""

from tradefeed.core.errors import (
    ConfigError,
    DecodeError,
    EnvelopeError,
    ErrorCategory,
    ErrorContext,
    ReportWriteError,
    SourceError,
    SourceNotFoundError,
    TradeFeedError,
    ValidationError,
    categorize_error,
)
from tradefeed.core.findings import Finding, FindingSink, Severity, Stage
from tradefeed.core.logging import LogContext, bind_context, configure_logging, get_logger
from tradefeed.core.timing import TimingResult, log_step, timed_block

__all__ = [
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "TradeFeedError",
    "SourceError",
    "SourceNotFoundError",
    "DecodeError",
    "ValidationError",
    "EnvelopeError",
    "ConfigError",
    "ReportWriteError",
    "categorize_error",
    # Findings
    "Finding",
    "FindingSink",
    "Severity",
    "Stage",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "LogContext",
    # Timing
    "TimingResult",
    "timed_block",
    "log_step",
]
