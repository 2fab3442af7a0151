"""HDR histogram of insert latencies.

Values are accepted in milliseconds and stored as integer microseconds,
which is what ``hdrh`` works in. Not thread-safe on its own; the
``OutcomeTally`` serializes access to it.
"""

from __future__ import annotations

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

# 1 microsecond to 5 minutes, in microseconds
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 300_000_000
_SIGNIFICANT_DIGITS = 3


class LatencyHistogram:
    """Millisecond-facing wrapper around ``HdrHistogram``."""

    def __init__(self) -> None:
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            _LOWEST_TRACKABLE_US, _HIGHEST_TRACKABLE_US, _SIGNIFICANT_DIGITS
        )

    def record_ms(self, latency_ms: float) -> None:
        """Record one latency, clamped to the trackable range."""
        value_us = int(latency_ms * 1000)
        value_us = max(_LOWEST_TRACKABLE_US, min(value_us, _HIGHEST_TRACKABLE_US))
        self._histogram.record_value(value_us)

    @property
    def count(self) -> int:
        return int(self._histogram.total_count)

    def percentile_ms(self, percentile: float) -> float:
        """Return the latency at ``percentile`` (0-100), or 0.0 when empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_value_at_percentile(percentile)) / 1000.0

    def max_ms(self) -> float:
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_max_value()) / 1000.0
