"""Data types for benchmark progress and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docbench._internal.config import BenchmarkConfig
    from docbench._internal.types import ErrorCounts, StatusCounts


def compute_throughput(completed: int, elapsed_seconds: float) -> float:
    """Operations per second, or 0.0 when no time has elapsed."""
    if elapsed_seconds <= 0:
        return 0.0
    return completed / elapsed_seconds


@dataclass(frozen=True)
class TallySnapshot:
    """Point-in-time copy of the shared outcome tally.

    Attributes:
        completed: Operations finished so far, successful or not.
        response_codes: Count per HTTP status code received.
        error_kinds: Count per transport error category.
        latency_p50: Median insert latency in milliseconds.
        latency_p95: 95th percentile insert latency in milliseconds.
        latency_p99: 99th percentile insert latency in milliseconds.
        latency_max: Slowest insert in milliseconds.
    """

    completed: int
    response_codes: StatusCounts = field(default_factory=dict)
    error_kinds: ErrorCounts = field(default_factory=dict)
    latency_p50: float = 0.0
    latency_p95: float = 0.0
    latency_p99: float = 0.0
    latency_max: float = 0.0

    @property
    def total_responses(self) -> int:
        return sum(self.response_codes.values())

    @property
    def total_errors(self) -> int:
        return sum(self.error_kinds.values())


@dataclass(frozen=True)
class ProgressEvent:
    """Periodic throughput report emitted while workers run.

    Attributes:
        component: Name of the emitting component.
        completed: Operations finished at the time of the report.
        elapsed_seconds: Seconds since dispatch started.
        throughput: ``completed / elapsed_seconds``.
    """

    component: str
    completed: int
    elapsed_seconds: float
    throughput: float


@dataclass
class RunTiming:
    """Wall-clock bounds of the dispatch phase (monotonic seconds).

    ``start`` is captured right before workers are launched and ``end``
    right after the last one finishes.
    """

    start: float = 0.0
    end: float | None = None

    def elapsed(self, now: float) -> float:
        """Seconds between ``start`` and ``end`` (or ``now`` while running)."""
        stop = self.end if self.end is not None else now
        return max(stop - self.start, 0.0)


@dataclass
class BenchmarkResult:
    """Complete result of a benchmark run.

    Attributes:
        config: Configuration the run used.
        summary: Final tally snapshot, taken after every worker joined.
        elapsed_seconds: Dispatch-phase wall-clock duration.
        throughput: Completed operations per second.
        complete: False if the run was interrupted before all work finished.
        progress_events: Every progress report emitted during the run.
    """

    config: BenchmarkConfig
    summary: TallySnapshot
    elapsed_seconds: float
    throughput: float
    complete: bool = True
    progress_events: list[ProgressEvent] = field(default_factory=list)
