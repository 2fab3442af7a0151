"""Top-level benchmark orchestrator."""

from __future__ import annotations

import signal
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from enum import Enum, auto
from typing import TYPE_CHECKING

from docbench._internal.errors import EngineError, ResourceError
from docbench._internal.logging import get_logger
from docbench.engine.reporter import ProgressReporter
from docbench.engine.resource import TargetResourceManager
from docbench.engine.worker import InsertWorker
from docbench.metrics.models import BenchmarkResult, RunTiming, compute_throughput
from docbench.metrics.tally import OutcomeTally
from docbench.transport.http_client import HttpClient, basic_auth_header
from docbench.workload.assignment import partition_operations
from docbench.workload.payload import PayloadGenerator

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Future
    from contextlib import AbstractContextManager

    from docbench._internal.config import BenchmarkConfig
    from docbench._internal.types import Headers
    from docbench.metrics.models import ProgressEvent, TallySnapshot
    from docbench.transport.http_client import HttpSender
    from docbench.workload.assignment import WorkAssignment

    ClientFactory = Callable[[Headers, float], AbstractContextManager[HttpSender]]

logger = get_logger("engine.orchestrator")


class RunState(Enum):
    """State machine for a benchmark run."""

    INIT = auto()
    RESOURCE_READY = auto()
    DISPATCHED = auto()
    DRAINING = auto()
    DONE = auto()
    FAILED = auto()


class BenchmarkOrchestrator:
    """Runs one insert benchmark from table preparation to final summary.

    State machine: INIT -> RESOURCE_READY -> DISPATCHED -> DRAINING -> DONE
                   INIT/RESOURCE_READY -> FAILED (on ResourceError)

    Table preparation completes on the calling thread before any worker
    starts. Workers run on a thread pool sized to ``num_workers``, one
    assignment each, sharing only the ``OutcomeTally``. The progress
    reporter is stopped only after every worker has joined, so the final
    summary reflects a settled tally.

    Attributes:
        config: The benchmark configuration.
    """

    def __init__(
        self,
        config: BenchmarkConfig,
        *,
        client_factory: ClientFactory | None = None,
        generator: PayloadGenerator | None = None,
        on_progress: Callable[[ProgressEvent], None] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Fully-resolved benchmark configuration.
            client_factory: Builds a context-managed HTTP client from
                default headers and a timeout. Defaults to ``HttpClient``.
            generator: Record payload source. Defaults to random records.
            on_progress: Optional observer invoked with each progress event.
        """
        self.config = config
        self._client_factory: ClientFactory = client_factory or _default_client
        self._generator = generator or PayloadGenerator()
        self._on_progress = on_progress

        self._state = RunState.INIT
        self._stop_event = threading.Event()
        self._auth_headers: Headers = (
            basic_auth_header(config.username, config.password)  # type: ignore[arg-type]
            if config.has_credentials
            else {}
        )

    @property
    def state(self) -> RunState:
        """Return the current run state."""
        return self._state

    def request_stop(self) -> None:
        """Ask workers to drain after their in-flight insert.

        Only affects a run in progress; each ``run()`` starts with the
        stop request cleared.
        """
        self._stop_event.set()

    def run(self) -> BenchmarkResult:
        """Execute the benchmark and return its result.

        Blocks until every worker has finished its assignment, or drained
        after a stop request (SIGINT/SIGTERM or ``request_stop``).

        Returns:
            BenchmarkResult with the final tally and throughput.

        Raises:
            ResourceError: If the target table could not be prepared. No
                worker is started in that case.
            EngineError: If a worker failed unexpectedly.
        """
        self._stop_event.clear()
        config = self.config
        logger.info(
            "Inserting %d records on %s:%d/%s using %d workers",
            config.total_operations,
            config.host,
            config.port,
            config.table_name,
            config.num_workers,
        )

        try:
            with self._client_factory(self._auth_headers, config.request_timeout) as client:
                TargetResourceManager(client).ensure(config)
        except ResourceError as exc:
            self._state = RunState.FAILED
            logger.error("Unable to prepare table %s: %s", config.table_name, exc)
            raise
        self._state = RunState.RESOURCE_READY

        assignments = partition_operations(config.total_operations, config.num_workers)
        tally = OutcomeTally()
        timing = RunTiming(start=time.monotonic())
        reporter = ProgressReporter(
            tally,
            timing,
            report_interval=config.report_interval,
            poll_interval=config.poll_interval,
            on_progress=self._on_progress,
        )
        reporter.start()

        with _StopSignals(self.request_stop):
            try:
                failures = self._dispatch(assignments, tally)
            finally:
                timing.end = time.monotonic()
                reporter.stop()

        if failures:
            self._state = RunState.FAILED
            msg = f"{len(failures)} worker(s) failed unexpectedly"
            raise EngineError(msg) from failures[0]

        summary = tally.snapshot()
        elapsed = timing.elapsed(time.monotonic())
        complete = summary.completed == config.total_operations
        self._state = RunState.DONE

        result = BenchmarkResult(
            config=config,
            summary=summary,
            elapsed_seconds=elapsed,
            throughput=compute_throughput(summary.completed, elapsed),
            complete=complete,
            progress_events=reporter.events,
        )
        _log_summary(result)
        return result

    def _dispatch(
        self,
        assignments: list[WorkAssignment],
        tally: OutcomeTally,
    ) -> list[BaseException]:
        """Run one worker per assignment and wait for all of them."""
        config = self.config
        workers = [
            InsertWorker(
                assignment,
                config.resource_url,
                tally,
                self._generator,
                stop_event=self._stop_event,
            )
            for assignment in assignments
        ]

        with ThreadPoolExecutor(
            max_workers=config.num_workers,
            thread_name_prefix="docbench-worker",
        ) as pool:
            futures: list[Future[int]] = [
                pool.submit(self._run_worker, worker) for worker in workers
            ]
            self._state = RunState.DISPATCHED
            logger.info("Dispatched %d workers", len(futures))

            self._state = RunState.DRAINING
            pending = set(futures)
            while pending:
                done, pending = wait(pending, timeout=config.poll_interval)
                if any(f.exception() is not None for f in done):
                    # A broken worker ends the run; the others drain.
                    self.request_stop()

        failures: list[BaseException] = []
        for future in futures:
            exc = future.exception()
            if exc is not None:
                logger.error("Worker failed: %r", exc)
                failures.append(exc)
        return failures

    def _run_worker(self, worker: InsertWorker) -> int:
        with self._client_factory(self._auth_headers, self.config.request_timeout) as client:
            return worker.run(client)


def _default_client(headers: Headers, timeout: float) -> HttpClient:
    return HttpClient(headers=headers, timeout=timeout)


class _StopSignals:
    """Routes SIGINT/SIGTERM to a stop callback for the duration of a block.

    Handlers can only be installed from the main thread; elsewhere this is
    a no-op.
    """

    def __init__(self, on_signal: Callable[[], None]) -> None:
        self._on_signal = on_signal
        self._original: dict[int, object] = {}

    def __enter__(self) -> _StopSignals:
        if threading.current_thread() is not threading.main_thread():
            return self
        for signum in (signal.SIGINT, signal.SIGTERM):
            self._original[signum] = signal.getsignal(signum)
            signal.signal(signum, self._handle)
        return self

    def __exit__(self, *exc_info: object) -> None:
        for signum, handler in self._original.items():
            signal.signal(signum, handler)  # type: ignore[arg-type]
        self._original.clear()

    def _handle(self, signum: int, _frame: object) -> None:
        logger.info("Signal %d received, draining workers", signum)
        self._on_signal()


def _log_summary(result: BenchmarkResult) -> None:
    summary: TallySnapshot = result.summary
    logger.info(
        "Benchmark %s: %d inserts in %.3f seconds: %.1f inserts/sec",
        "finished" if result.complete else "interrupted",
        summary.completed,
        result.elapsed_seconds,
        result.throughput,
        extra={
            "completed": summary.completed,
            "complete": result.complete,
            "throughput": result.throughput,
            "response_codes": dict(summary.response_codes),
            "error_kinds": dict(summary.error_kinds),
        },
    )
    if summary.response_codes:
        logger.info("-------------Response codes--------------")
    for code, count in sorted(summary.response_codes.items()):
        logger.info("%d: %d", code, count)
    if summary.error_kinds:
        logger.info("-----------------Errors------------------")
    for kind, count in sorted(summary.error_kinds.items()):
        logger.info("%s: %d", kind, count)
