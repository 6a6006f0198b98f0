"""
Findings and the error channel.

A finding is a validation or diagnostic message about one feed line. It is
data, not an exception: validators return lists of findings, the pipeline
routes every one of them through a ``FindingSink`` which writes one
human-readable line per finding to the error channel and keeps them for the
run result.

Manifesto:
    Trade feeds arrive with broken records. Those records must be:

    - **Reported:** Every problem reaches the error channel, one line each
    - **Classified:** Severity + code + stage for pattern analysis
    - **Traceable:** The 0-based feed line index travels with the finding
    - **Kept:** A field-level finding never removes a row from its report

    Only STRUCTURAL findings stop a run; that decision belongs to the
    pipeline, which asks the sink ``has_structural()``.

Architecture:
    ::

        validators ──► [Finding, ...] ──► FindingSink.write_batch()
                                              │
                                              ├── error channel (stderr / file)
                                              ├── structlog (debug)
                                              └── .findings (run result)

Examples:
    >>> sink = FindingSink(io.StringIO())
    >>> sink.write(Finding.field("INVALID_DIRECTION", "Invalid Trade Direction 'X'", 3))
    >>> sink.count
    1
    >>> sink.has_structural()
    False

Tags:
    findings, validation, error-channel, tradefeed
"""

from __future__ import annotations

import sys
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from tradefeed.core.logging import get_logger

log = get_logger(__name__)


class Severity(str, Enum):
    """
    Finding severity.

    STRUCTURAL: the feed cannot be trusted past this point; the run aborts.
    FIELD: the record is suspect but is still emitted to its report.
    """

    STRUCTURAL = "STRUCTURAL"
    FIELD = "FIELD"


class Stage(str, Enum):
    """Pipeline stage that produced a finding."""

    DECODE = "decode"
    VALIDATE = "validate"
    EMIT = "emit"


@dataclass(frozen=True)
class Finding:
    """
    One diagnostic about one feed line.

    Attributes:
        severity: STRUCTURAL or FIELD
        code: Stable machine code (e.g. ``INVALID_DIRECTION``)
        message: Human-readable explanation
        line_index: 0-based index of the feed line, None for feed-wide findings
        stage: decode, validate or emit
    """

    severity: Severity
    code: str
    message: str
    line_index: int | None = None
    stage: Stage = Stage.VALIDATE

    @classmethod
    def structural(
        cls, code: str, message: str, line_index: int | None = None, stage: Stage = Stage.VALIDATE
    ) -> Finding:
        return cls(Severity.STRUCTURAL, code, message, line_index, stage)

    @classmethod
    def field(
        cls, code: str, message: str, line_index: int | None = None, stage: Stage = Stage.VALIDATE
    ) -> Finding:
        return cls(Severity.FIELD, code, message, line_index, stage)

    @property
    def is_structural(self) -> bool:
        return self.severity is Severity.STRUCTURAL

    def as_tuple(self) -> tuple[Severity, str, int | None]:
        """The (severity, message, record-index) triple."""
        return (self.severity, self.message, self.line_index)

    def __str__(self) -> str:
        where = "feed" if self.line_index is None else f"line {self.line_index}"
        return f"{self.severity.value} {self.stage.value} {where} [{self.code}]: {self.message}"


class FindingSink:
    """
    Route findings to the error channel and keep them for the run result.

    Args:
        stream: Text stream for the error channel (default: ``sys.stderr``)
    """

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream
        self._findings: list[Finding] = []

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    @property
    def count(self) -> int:
        return len(self._findings)

    @property
    def findings(self) -> list[Finding]:
        return list(self._findings)

    def write(self, finding: Finding) -> None:
        """Report a single finding."""
        self._findings.append(finding)
        print(str(finding), file=self.stream)
        log.debug(
            "finding_reported",
            severity=finding.severity.value,
            code=finding.code,
            stage=finding.stage.value,
            line_index=finding.line_index,
        )

    def write_batch(self, findings: Iterable[Finding]) -> int:
        """Report many findings. Returns the number written."""
        written = 0
        for finding in findings:
            self.write(finding)
            written += 1
        if written:
            self.stream.flush()
        return written

    def has_structural(self) -> bool:
        return any(f.is_structural for f in self._findings)

    def structural(self) -> list[Finding]:
        return [f for f in self._findings if f.is_structural]

    def counts_by_severity(self) -> dict[str, int]:
        counts = Counter(f.severity.value for f in self._findings)
        return {s.value: counts.get(s.value, 0) for s in Severity}


__all__ = ["Severity", "Stage", "Finding", "FindingSink"]
