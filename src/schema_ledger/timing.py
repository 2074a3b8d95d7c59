"""
Timing utilities for measuring migration steps.

The runner records each script's wall-clock duration in the ledger
(``execution_time``, integer milliseconds). ``timed_block`` wraps the
measurement so the same timer can also carry metrics for the log line.

Usage:
    with timed_block("20240101000000_create_users") as timer:
        apply_statements()
        timer.add_metric("statements", 3)
    ledger.record(..., execution_time_ms=timer.elapsed_ms)
"""

import time
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any


@dataclass
class TimingResult:
    """Result of a timed operation."""

    step: str
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    error_info: dict[str, Any] | None = None

    def stop(self) -> "TimingResult":
        """Record end time. Later calls keep the first end time."""
        if self.ended_at is None:
            self.ended_at = time.perf_counter()
        return self

    @property
    def duration_seconds(self) -> float:
        """Duration in seconds."""
        if self.ended_at is None:
            return time.perf_counter() - self.started_at
        return self.ended_at - self.started_at

    @property
    def duration_ms(self) -> float:
        """Duration in milliseconds."""
        return self.duration_seconds * 1000

    @property
    def elapsed_ms(self) -> int:
        """Whole milliseconds, as persisted in the ledger."""
        return int(round(self.duration_ms))

    def add_metric(self, key: str, value: Any) -> "TimingResult":
        """Add a metric to include in the log output."""
        self.metrics[key] = value
        return self

    def set_error(self, e: BaseException) -> "TimingResult":
        """Record error information."""
        self.error_info = {
            "error_type": type(e).__name__,
            "error_message": str(e),
            "error_stack": "".join(traceback.format_exception(type(e), e, e.__traceback__)),
        }
        return self

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to dict for logging."""
        result: dict[str, Any] = {"duration_ms": round(self.duration_ms, 2)}
        result.update(self.metrics)
        return result


@contextmanager
def timed_block(step: str = "unnamed") -> Iterator[TimingResult]:
    """
    Low-level timing context manager.

    Does not log; the caller decides what to do with the timer. On error the
    timer is stopped and the exception recorded before it propagates.
    """
    timer = TimingResult(step=step)
    try:
        yield timer
    except BaseException as e:
        timer.stop()
        timer.set_error(e)
        raise
    finally:
        timer.stop()
