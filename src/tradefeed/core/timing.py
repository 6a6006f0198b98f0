"""
Timing utilities for pipeline stages.

- Context manager: ``with log_step("feed.sort") as timer:``
- Manual: ``with timed_block("run") as timer``; then ``timer.duration_seconds``

Logs start at DEBUG and end at INFO (with duration_ms). Timer overhead is
a pair of ``time.perf_counter`` calls.
"""

import time
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from tradefeed.core.logging import get_logger


@dataclass
class TimingResult:
    """Result of a timed operation."""

    step: str
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    status: str = "ok"  # ok, error
    error_info: dict[str, Any] | None = None

    def stop(self) -> "TimingResult":
        """Record end time."""
        self.ended_at = time.perf_counter()
        return self

    @property
    def duration_seconds(self) -> float:
        if self.ended_at is None:
            return time.perf_counter() - self.started_at
        return self.ended_at - self.started_at

    @property
    def duration_ms(self) -> float:
        return self.duration_seconds * 1000

    def add_metric(self, key: str, value: Any) -> "TimingResult":
        """Add a metric to include in the log output."""
        self.metrics[key] = value
        return self

    def set_error(self, e: Exception) -> "TimingResult":
        self.status = "error"
        self.error_info = {
            "error_type": type(e).__name__,
            "error_message": str(e),
            "error_stack": traceback.format_exc(),
        }
        return self

    def to_log_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"duration_ms": round(self.duration_ms, 2)}
        result.update(self.metrics)
        return result

    def to_error_dict(self) -> dict[str, Any]:
        result = self.to_log_dict()
        result["status"] = "error"
        if self.error_info:
            result.update(self.error_info)
        return result


@contextmanager
def timed_block(step: str = "unnamed") -> Iterator[TimingResult]:
    """
    Low-level timing context manager. Does not log.

    Usage:
        with timed_block("run") as timer:
            process()
        print(f"Took {timer.duration_seconds:.3f}s")
    """
    timer = TimingResult(step=step)
    try:
        yield timer
    finally:
        timer.stop()


@contextmanager
def log_step(event: str, log_start: bool = True, level: str = "info", **extra_metrics) -> Iterator[TimingResult]:
    """
    Context manager that logs step start/end with timing.

    Usage:
        with log_step("feed.sort", records=500) as timer:
            ordered = sort_by_notional(records)
            timer.add_metric("rows_out", len(ordered))

        # DEBUG feed.sort.start records=500
        # INFO  feed.sort.end   duration_ms=1.2 records=500 rows_out=500

    Args:
        event: Event name (e.g., "feed.sort")
        log_start: Whether to log at start (DEBUG)
        level: Log level for end message ("info" or "debug")
        **extra_metrics: Additional metrics to include in logs
    """
    log = get_logger("tradefeed.timing")
    timer = TimingResult(step=event, metrics=dict(extra_metrics))

    if log_start:
        log.debug(f"{event}.start", **extra_metrics)

    try:
        yield timer
    except Exception as e:
        timer.stop()
        timer.set_error(e)
        log.error(f"{event}.error", **timer.to_error_dict())
        raise
    finally:
        timer.stop()

    getattr(log, level)(f"{event}.end", **timer.to_log_dict())


__all__ = ["TimingResult", "timed_block", "log_step"]
