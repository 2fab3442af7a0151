"""Custom exception hierarchy for DocBench."""

from __future__ import annotations


class DocBenchError(Exception):
    """Base exception for all DocBench errors.

    All custom exceptions in DocBench inherit from this class, making it
    easy to catch any DocBench-specific error with a single except clause.
    """


class ConfigError(DocBenchError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Worker count below 1 or a negative operation count.
        - An environment variable has an invalid value.
        - Only one of username/password was supplied.
    """


class TransportError(DocBenchError):
    """Raised when a single HTTP request could not be completed.

    No response was received: the connection was refused, timed out, the
    peer disconnected, or the body could not be encoded.

    Attributes:
        kind: Stable category label, the class name of the underlying error.
    """

    def __init__(self, kind: str, message: str = "") -> None:
        self.kind = kind
        super().__init__(f"{kind}: {message}" if message else kind)


class ResourceError(DocBenchError):
    """Raised when the target table cannot be prepared before load starts.

    Attributes:
        step: Which preparation step failed: ``probe``, ``delete`` or ``create``.
        url: URL of the failing request.
        status: HTTP status received, or None on a transport failure.
    """

    def __init__(
        self,
        step: str,
        url: str,
        reason: str,
        *,
        status: int | None = None,
    ) -> None:
        self.step = step
        self.url = url
        self.status = status
        super().__init__(f"{step} failed for {url}: {reason}")


class EngineError(DocBenchError):
    """Raised when the benchmark engine hits an unexpected failure.

    Per-insert transport failures are never escalated to this error; it
    signals a bug or an unrecoverable condition inside a worker.
    """
