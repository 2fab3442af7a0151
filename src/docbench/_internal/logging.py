"""Logging for DocBench: one stderr handler on the ``docbench`` namespace."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

_ROOT = "docbench"
_HANDLER_NAME = "docbench-stderr"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class _JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Benchmark figures passed with ``extra=`` (``completed``, ``throughput``,
    ``response_codes`` ...) become top-level keys next to the message, so a
    run's progress can be parsed without scraping the text.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "time": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        entry.update(_extra_fields(record))
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


_TEXT_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"


def setup_logging(
    level: int = logging.INFO,
    *,
    json_format: bool = False,
) -> logging.Logger:
    """Route ``docbench`` log records to stderr.

    Calling it again replaces the previous handler, so the format can be
    switched and the handler follows the current ``sys.stderr``.

    Args:
        level: Threshold for the ``docbench`` namespace.
        json_format: Emit JSON lines instead of text.

    Returns:
        The ``docbench`` logger.
    """
    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)
    for existing in [h for h in logger.handlers if h.get_name() == _HANDLER_NAME]:
        logger.removeHandler(existing)
        existing.close()

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(
        _JsonFormatter()
        if json_format
        else logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S")
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``docbench.<name>``, e.g. ``get_logger("engine.worker")``."""
    return logging.getLogger(f"{_ROOT}.{name}")
