"""Insert worker: executes one assignment of inserts sequentially."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING

from docbench._internal.errors import TransportError
from docbench._internal.logging import get_logger
from docbench.transport.http_client import JSON_CONTENT_TYPE

if TYPE_CHECKING:
    from docbench.metrics.tally import OutcomeTally
    from docbench.transport.http_client import HttpSender
    from docbench.workload.assignment import WorkAssignment
    from docbench.workload.payload import PayloadGenerator

logger = get_logger("engine.worker")

_INSERT_HEADERS = {"Content-Type": JSON_CONTENT_TYPE}


class InsertWorker:
    """POSTs one generated record per assigned operation index.

    Every operation is recorded in the tally exactly once: its status code
    when a response arrived, its error kind when it did not. Failures are
    never retried. The worker checks ``stop_event`` between operations so
    an interrupted run drains after the in-flight insert.

    Attributes:
        assignment: The operation indices this worker owns.
    """

    def __init__(
        self,
        assignment: WorkAssignment,
        url: str,
        tally: OutcomeTally,
        generator: PayloadGenerator,
        *,
        stop_event: threading.Event | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            assignment: Operation indices to execute.
            url: Target table URL.
            tally: Shared outcome tally.
            generator: Source of record payloads.
            stop_event: Optional event requesting an early drain.
        """
        self.assignment = assignment
        self._url = url
        self._tally = tally
        self._generator = generator
        self._stop_event = stop_event or threading.Event()

    def run(self, client: HttpSender) -> int:
        """Execute the assignment.

        Args:
            client: HTTP client owned by this worker, already carrying the
                authentication header if credentials are configured.

        Returns:
            Number of operations executed (less than the assignment only
            when stopped early).
        """
        worker_id = self.assignment.worker_id
        logger.debug(
            "Worker %d starting: %d inserts", worker_id, self.assignment.count
        )
        executed = 0
        for index in self.assignment.indices:
            if self._stop_event.is_set():
                logger.debug("Worker %d stopping before insert %d", worker_id, index)
                break
            self._insert(client, index)
            executed += 1
        logger.debug("Worker %d finished: %d inserts", worker_id, executed)
        return executed

    def _insert(self, client: HttpSender, index: int) -> None:
        payload = self._generator.generate()
        start = time.monotonic()
        try:
            status = client.send(
                "POST", self._url, headers=_INSERT_HEADERS, body=payload
            )
        except TransportError as exc:
            logger.debug("Insert %d failed: %s", index, exc)
            self._tally.record_error(exc.kind)
            return
        self._tally.record_response(status, (time.monotonic() - start) * 1000)
