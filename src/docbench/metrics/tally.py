"""Thread-safe outcome aggregation shared by all insert workers."""

from __future__ import annotations

import threading
from collections import Counter

from docbench.metrics.latency import LatencyHistogram
from docbench.metrics.models import TallySnapshot


class OutcomeTally:
    """Completed count plus response-code and error-kind histograms.

    Every mutation goes through a single ``threading.Lock``, so concurrent
    workers never lose an update and readers never see a half-applied one.
    ``record_response`` and ``record_error`` update a histogram and the
    completed counter in one locked step, which keeps
    ``completed == sum(response_codes) + sum(error_kinds)`` true in every
    snapshot. The finer-grained ``record_*`` methods are kept for callers
    that account for the pieces separately.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._completed = 0
        self._response_codes: Counter[int] = Counter()
        self._error_kinds: Counter[str] = Counter()
        self._latency = LatencyHistogram()

    @property
    def completed(self) -> int:
        """Operations finished so far."""
        with self._lock:
            return self._completed

    def record_completed(self) -> None:
        with self._lock:
            self._completed += 1

    def record_response_code(self, code: int) -> None:
        with self._lock:
            self._response_codes[code] += 1

    def record_error_kind(self, kind: str) -> None:
        with self._lock:
            self._error_kinds[kind] += 1

    def record_response(self, code: int, latency_ms: float | None = None) -> None:
        """Account for an insert that received a response.

        Args:
            code: HTTP status code, whatever its class.
            latency_ms: Request latency, recorded into the histogram if given.
        """
        with self._lock:
            self._response_codes[code] += 1
            if latency_ms is not None:
                self._latency.record_ms(latency_ms)
            self._completed += 1

    def record_error(self, kind: str) -> None:
        """Account for an insert that failed without a response.

        Args:
            kind: Stable error category label.
        """
        with self._lock:
            self._error_kinds[kind] += 1
            self._completed += 1

    def snapshot(self) -> TallySnapshot:
        """Return a consistent copy of all counters."""
        with self._lock:
            return TallySnapshot(
                completed=self._completed,
                response_codes=dict(self._response_codes),
                error_kinds=dict(self._error_kinds),
                latency_p50=self._latency.percentile_ms(50.0),
                latency_p95=self._latency.percentile_ms(95.0),
                latency_p99=self._latency.percentile_ms(99.0),
                latency_max=self._latency.max_ms(),
            )
