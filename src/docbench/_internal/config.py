"""Benchmark configuration for DocBench."""

from __future__ import annotations

import os
from dataclasses import dataclass

from docbench._internal.errors import ConfigError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5984
DEFAULT_TABLE_NAME = "bench_table"
DEFAULT_TOTAL_OPERATIONS = 1000
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_REPORT_INTERVAL = 10.0
DEFAULT_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class BenchmarkConfig:
    """Fully-resolved configuration for one benchmark run.

    Attributes:
        host: Target host of the document store.
        port: Target port of the document store.
        table_name: Name of the table (database/collection) receiving inserts.
        total_operations: Total number of inserts across all workers.
        num_workers: Number of concurrent insert workers.
        clean: Drop and recreate the table if it already exists.
        quorum: Optional quorum/partition hint sent as ``?q=`` on create.
        username: Optional HTTP Basic auth username.
        password: Optional HTTP Basic auth password.
        request_timeout: Per-request timeout in seconds.
        report_interval: Seconds between progress reports.
        poll_interval: Seconds between stop-signal checks in background loops.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    table_name: str = DEFAULT_TABLE_NAME
    total_operations: int = DEFAULT_TOTAL_OPERATIONS
    num_workers: int = 1
    clean: bool = False
    quorum: int | None = None
    username: str | None = None
    password: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    report_interval: float = DEFAULT_REPORT_INTERVAL
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        if self.num_workers < 1:
            msg = f"num_workers must be >= 1, got: {self.num_workers}"
            raise ConfigError(msg)
        if self.total_operations < 0:
            msg = f"total_operations must be >= 0, got: {self.total_operations}"
            raise ConfigError(msg)
        if not 1 <= self.port <= 65535:
            msg = f"port must be in 1..65535, got: {self.port}"
            raise ConfigError(msg)
        if not self.table_name:
            msg = "table_name must not be empty"
            raise ConfigError(msg)
        if self.quorum is not None and self.quorum < 1:
            msg = f"quorum must be >= 1, got: {self.quorum}"
            raise ConfigError(msg)
        for name in ("request_timeout", "report_interval", "poll_interval"):
            value = getattr(self, name)
            if value <= 0:
                msg = f"{name} must be positive, got: {value}"
                raise ConfigError(msg)
        if (self.username is None) != (self.password is None):
            msg = "username and password must be given together"
            raise ConfigError(msg)

    @property
    def resource_url(self) -> str:
        """URL of the target table; inserts are POSTed here."""
        return f"http://{self.host}:{self.port}/{self.table_name}"

    @property
    def create_url(self) -> str:
        """URL used to create the table, carrying the quorum hint if set."""
        if self.quorum is None:
            return self.resource_url
        return f"{self.resource_url}?q={self.quorum}"

    @property
    def has_credentials(self) -> bool:
        """Return True if HTTP Basic credentials are configured."""
        return self.username is not None and self.password is not None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got: {raw!r}"
        raise ConfigError(msg) from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        msg = f"{name} must be a number, got: {raw!r}"
        raise ConfigError(msg) from None


def load_config(**overrides: object) -> BenchmarkConfig:
    """Build a BenchmarkConfig from environment defaults and overrides.

    Environment variables:
        DOCBENCH_HOST: Target host (default: localhost).
        DOCBENCH_PORT: Target port (default: 5984).
        DOCBENCH_TIMEOUT: Request timeout in seconds (default: 30.0).
        DOCBENCH_REPORT_INTERVAL: Progress interval in seconds (default: 10.0).

    Args:
        **overrides: BenchmarkConfig field values. ``None`` values are
            ignored so unset CLI options fall through to the defaults.

    Returns:
        Validated BenchmarkConfig instance.

    Raises:
        ConfigError: If an environment variable or override is invalid.
    """
    values: dict[str, object] = {
        "host": os.environ.get("DOCBENCH_HOST", DEFAULT_HOST),
        "port": _env_int("DOCBENCH_PORT", DEFAULT_PORT),
        "request_timeout": _env_float("DOCBENCH_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        "report_interval": _env_float(
            "DOCBENCH_REPORT_INTERVAL", DEFAULT_REPORT_INTERVAL
        ),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return BenchmarkConfig(**values)  # type: ignore[arg-type]
    except TypeError as exc:
        raise ConfigError(str(exc)) from exc
