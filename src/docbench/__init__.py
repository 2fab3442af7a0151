"""DocBench — concurrent insert-load benchmark for document-store HTTP endpoints."""

from __future__ import annotations

from docbench._internal.config import BenchmarkConfig, load_config
from docbench._internal.errors import (
    ConfigError,
    DocBenchError,
    EngineError,
    ResourceError,
    TransportError,
)
from docbench.engine.orchestrator import BenchmarkOrchestrator, RunState
from docbench.metrics.models import BenchmarkResult, ProgressEvent, TallySnapshot
from docbench.metrics.tally import OutcomeTally
from docbench.transport.http_client import HttpClient
from docbench.workload.payload import PayloadGenerator, generate_record

__version__ = "0.1.0"

__all__ = [
    "BenchmarkConfig",
    "BenchmarkOrchestrator",
    "BenchmarkResult",
    "ConfigError",
    "DocBenchError",
    "EngineError",
    "HttpClient",
    "OutcomeTally",
    "PayloadGenerator",
    "ProgressEvent",
    "ResourceError",
    "RunState",
    "TallySnapshot",
    "TransportError",
    "generate_record",
    "load_config",
]
