"""Tests for InsertWorker."""

from __future__ import annotations

import json
import threading

from docbench._internal.errors import TransportError
from docbench.engine.worker import InsertWorker
from docbench.metrics.tally import OutcomeTally
from docbench.workload.assignment import WorkAssignment
from docbench.workload.payload import PayloadGenerator

_URL = "http://localhost:5984/bench_table"


class _RecordingSender:
    """Answers POSTs with a fixed status, or fails selected calls."""

    def __init__(
        self, status: int = 201, fail_every: int = 0, kind: str = "TimeoutError"
    ) -> None:
        self.status = status
        self.fail_every = fail_every
        self.kind = kind
        self.calls: list[tuple[str, str, dict[str, str] | None, str | None]] = []

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ) -> int:
        self.calls.append((method, url, headers, body))
        if self.fail_every and len(self.calls) % self.fail_every == 0:
            raise TransportError(self.kind, "boom")
        return self.status


class _CountingGenerator(PayloadGenerator):
    def __init__(self) -> None:
        self.calls = 0

    def generate(self) -> str:
        self.calls += 1
        return json.dumps({"n": self.calls})


class TestInsertWorker:
    def test_posts_one_record_per_index(self):
        tally = OutcomeTally()
        sender = _RecordingSender()
        generator = _CountingGenerator()
        worker = InsertWorker(WorkAssignment(0, 1, 5), _URL, tally, generator)

        executed = worker.run(sender)

        assert executed == 5
        assert generator.calls == 5
        assert [c[0] for c in sender.calls] == ["POST"] * 5
        assert all(c[1] == _URL for c in sender.calls)
        assert all(c[2] == {"Content-Type": "application/json"} for c in sender.calls)
        assert [json.loads(c[3])["n"] for c in sender.calls] == [1, 2, 3, 4, 5]

        snapshot = tally.snapshot()
        assert snapshot.completed == 5
        assert snapshot.response_codes == {201: 5}

    def test_non_success_status_is_a_normal_outcome(self):
        tally = OutcomeTally()
        InsertWorker(WorkAssignment(0, 1, 3), _URL, tally, PayloadGenerator()).run(
            _RecordingSender(status=409)
        )
        snapshot = tally.snapshot()
        assert snapshot.response_codes == {409: 3}
        assert snapshot.error_kinds == {}

    def test_transport_failures_are_counted_not_retried(self):
        tally = OutcomeTally()
        sender = _RecordingSender(fail_every=2, kind="ServerDisconnectedError")
        worker = InsertWorker(WorkAssignment(0, 1, 10), _URL, tally, PayloadGenerator())

        assert worker.run(sender) == 10
        assert len(sender.calls) == 10

        snapshot = tally.snapshot()
        assert snapshot.completed == 10
        assert snapshot.response_codes == {201: 5}
        assert snapshot.error_kinds == {"ServerDisconnectedError": 5}

    def test_empty_assignment(self):
        tally = OutcomeTally()
        sender = _RecordingSender()
        assert InsertWorker(WorkAssignment(3, 1, 0), _URL, tally, PayloadGenerator()).run(sender) == 0
        assert sender.calls == []
        assert tally.completed == 0

    def test_stop_event_drains_early(self):
        tally = OutcomeTally()
        stop = threading.Event()

        class _StoppingSender(_RecordingSender):
            def send(
                self,
                method: str,
                url: str,
                *,
                headers: dict[str, str] | None = None,
                body: str | None = None,
            ) -> int:
                status = super().send(method, url, headers=headers, body=body)
                if len(self.calls) == 3:
                    stop.set()
                return status

        sender = _StoppingSender()
        worker = InsertWorker(
            WorkAssignment(0, 1, 100), _URL, tally, PayloadGenerator(), stop_event=stop
        )

        assert worker.run(sender) == 3
        assert tally.completed == 3
