"""Pipeline base types: a run validates its parameters, executes, and reports a result."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tradefeed.core.findings import Finding


class PipelineStatus(str, Enum):
    """Terminal state of a run."""

    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Outcome of one run, with its metrics and every finding reported."""

    status: PipelineStatus
    started_at: datetime
    completed_at: datetime | None = None
    error: str | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    findings: list["Finding"] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def succeeded(self) -> bool:
        return self.status == PipelineStatus.COMPLETED


class Pipeline(ABC):
    """
    Named unit of work.

    ``run`` checks the parameters first so that configuration problems
    raise before any input is touched; subclasses implement ``execute``.
    """

    name: str = ""
    description: str = ""

    def run(self) -> PipelineResult:
        self.validate_params()
        return self.execute()

    @abstractmethod
    def execute(self) -> PipelineResult:
        ...

    def validate_params(self) -> None:
        """Raise ``ConfigError`` when the pipeline cannot run. No-op by default."""
