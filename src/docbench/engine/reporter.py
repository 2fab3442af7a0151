"""Background progress reporting while workers are running."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING

from docbench._internal.logging import get_logger
from docbench.metrics.models import ProgressEvent, compute_throughput

if TYPE_CHECKING:
    from collections.abc import Callable

    from docbench.metrics.models import RunTiming
    from docbench.metrics.tally import OutcomeTally

logger = get_logger("engine.reporter")

COMPONENT_NAME = "reporter"


class ProgressReporter:
    """Emits a throughput snapshot every ``report_interval`` seconds.

    Runs a daemon thread that wakes every ``poll_interval`` seconds to check
    its stop event, so it exits within one poll after ``stop()``. It only
    reads the tally. Emission happens under ``_emit_lock`` and re-checks the
    stop event, so once ``stop()`` returns no further event is emitted.
    A failing ``on_progress`` observer is logged and does not stop reporting.

    Attributes:
        report_interval: Seconds between progress events.
        poll_interval: Seconds between stop-event checks.
    """

    def __init__(
        self,
        tally: OutcomeTally,
        timing: RunTiming,
        *,
        report_interval: float = 10.0,
        poll_interval: float = 0.05,
        on_progress: Callable[[ProgressEvent], None] | None = None,
    ) -> None:
        """Initialize the reporter.

        Args:
            tally: Shared outcome tally to read from.
            timing: Run timing holding the dispatch start timestamp.
            report_interval: Seconds between progress events.
            poll_interval: Seconds between stop-event checks.
            on_progress: Optional observer invoked with each event.
        """
        self._tally = tally
        self._timing = timing
        self.report_interval = report_interval
        self.poll_interval = poll_interval
        self._on_progress = on_progress

        self._stop_event = threading.Event()
        self._emit_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._events: list[ProgressEvent] = []

    @property
    def events(self) -> list[ProgressEvent]:
        """Return a copy of every event emitted so far."""
        with self._emit_lock:
            return list(self._events)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the reporter background thread."""
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="docbench-reporter",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Reporter thread started")

    def stop(self) -> None:
        """Signal the reporter to stop and wait for its loop to exit."""
        with self._emit_lock:
            self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        logger.debug("Reporter thread stopped")

    def _run_loop(self) -> None:
        last_report = time.monotonic()
        while not self._stop_event.wait(timeout=self.poll_interval):
            now = time.monotonic()
            if now - last_report >= self.report_interval:
                self._emit(now)
                last_report = now

    def _emit(self, now: float) -> None:
        with self._emit_lock:
            if self._stop_event.is_set():
                return
            completed = self._tally.completed
            elapsed = self._timing.elapsed(now)
            event = ProgressEvent(
                component=COMPONENT_NAME,
                completed=completed,
                elapsed_seconds=elapsed,
                throughput=compute_throughput(completed, elapsed),
            )
            self._events.append(event)
            logger.info(
                "Progress: %d inserts in %.1f seconds: %.1f inserts/sec",
                event.completed,
                event.elapsed_seconds,
                event.throughput,
                extra={"completed": event.completed, "throughput": event.throughput},
            )

        # Outside the lock so observers may read ``events``. ``stop()`` joins
        # this thread, so the call still finishes before ``stop()`` returns.
        if self._on_progress is not None:
            try:
                self._on_progress(event)
            except Exception:
                logger.exception("Progress observer failed")
