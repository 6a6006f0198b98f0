"""
Structured error types for tradefeed.

Provides a small hierarchy of typed errors carrying a category, structured
context and an optional chained cause. Errors are reserved for conditions
the pipeline cannot turn into a finding: an unreadable feed, bad
configuration, a field that cannot be decoded, or a structurally broken
envelope.

Manifesto:
    - **Typed Error Hierarchy:** Different error types for different stages
    - **Rich Context:** Errors carry metadata for logging
    - **Error Chaining:** Preserve original exceptions while adding context
    - **Findings stay data:** Per-record problems travel as ``Finding``
      objects, never as exceptions across module boundaries

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      TradeFeedError                          │
        │            (category, context, cause)                        │
        ├─────────────────────────────────────────────────────────────┤
        │  SourceError        DecodeError        ValidationError      │
        │  (SOURCE)           (PARSE)            (VALIDATION)         │
        │      │                                      │                │
        │  SourceNotFound                        EnvelopeError        │
        │                                                              │
        │  ConfigError        ReportWriteError                        │
        │  (CONFIG)           (STORAGE)                               │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = DecodeError("not a number", field="quantity", value="00x")
    >>> error.category
    <ErrorCategory.PARSE: 'PARSE'>
    >>> error.with_context(line_index=3).context.line_index
    3

Tags:
    error-handling, exception-hierarchy, error-context, tradefeed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    SOURCE = "SOURCE"  # Feed file missing or unreadable
    PARSE = "PARSE"  # Field decoding
    VALIDATION = "VALIDATION"  # Rule violations
    CONFIG = "CONFIG"  # Missing or invalid settings
    STORAGE = "STORAGE"  # Report destinations
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        pipeline: Name of the pipeline where the error occurred
        stage: Processing stage (decode, validate, emit)
        source_path: Feed or report path involved
        line_index: 0-based index of the feed line
        tag: Record tag of the line
        metadata: Additional key-value pairs
    """

    pipeline: str | None = None
    stage: str | None = None
    source_path: str | None = None
    line_index: int | None = None
    tag: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["pipeline", "stage", "source_path", "line_index", "tag"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TradeFeedError(Exception):
    """
    Base exception for all tradefeed errors.

    Subclasses set ``default_category`` so that callers rarely pass one.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TradeFeedError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SourceError("Feed missing").with_context(source_path=str(path))
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
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


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class SourceError(TradeFeedError):
    """The feed could not be read."""

    default_category = ErrorCategory.SOURCE


class SourceNotFoundError(SourceError):
    """The feed path does not exist."""

    def __init__(self, path: str, message: str | None = None):
        super().__init__(message or f"Feed not found: {path}")
        self.context.source_path = path


# =============================================================================
# DECODE / VALIDATION ERRORS
# =============================================================================


class DecodeError(TradeFeedError):
    """
    A fixed-width field could not be converted to its typed value.

    Raised by the field decoder and caught by the pipeline, which turns it
    into a ``decode`` stage finding for the offending line.
    """

    default_category = ErrorCategory.PARSE

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class ValidationError(TradeFeedError):
    """Data validation error."""

    default_category = ErrorCategory.VALIDATION


class EnvelopeError(ValidationError):
    """
    The feed envelope is structurally broken and the run must stop.

    Carries the structural findings that caused the abort.
    """

    def __init__(self, message: str, findings: list | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.findings = list(findings or [])

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["findings"] = [str(f) for f in self.findings]
        return result


# =============================================================================
# CONFIG / STORAGE ERRORS
# =============================================================================


class ConfigError(TradeFeedError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG


class ReportWriteError(TradeFeedError):
    """A report row or file could not be written."""

    default_category = ErrorCategory.STORAGE


def categorize_error(error: Exception) -> ErrorCategory:
    """Map any exception to an ErrorCategory."""
    if isinstance(error, TradeFeedError):
        return error.category
    if isinstance(error, FileNotFoundError):
        return ErrorCategory.SOURCE
    if isinstance(error, (OSError, UnicodeError)):
        return ErrorCategory.STORAGE
    if isinstance(error, ValueError):
        return ErrorCategory.PARSE
    return ErrorCategory.UNKNOWN


__all__ = [
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
]
