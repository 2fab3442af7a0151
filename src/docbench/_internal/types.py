"""Shared type aliases for DocBench."""

from __future__ import annotations

# HTTP headers dictionary.
Headers = dict[str, str]

# Response-code histogram: status code -> count.
StatusCounts = dict[int, int]

# Error-kind histogram: error category label -> count.
ErrorCounts = dict[str, int]
