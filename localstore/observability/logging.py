"""
Structured logging for the adapter.

Records are emitted through the standard `logging` tree. `JsonFormatter`
renders each one as a single JSON line carrying:
- the usual level / logger / message fields
- any keyword fields passed to `StructuredLogger`
- request-scoped fields bound with `log_context(...)` (method, url, ...)

Plain-text output is available for interactive use via
`setup_logging(json_output=False)`.
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Iterable, Iterator, Mapping, Optional, TextIO


class LogLevel(IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


_request_fields: ContextVar[Mapping[str, Any]] = ContextVar("localstore_log_fields", default={})

# Attributes every LogRecord carries; anything else arrived through `extra`
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


@contextmanager
def log_context(**fields: Any) -> Iterator[Mapping[str, Any]]:
    """Attach fields to every record logged inside the block (nests)."""
    merged = {**_request_fields.get(), **fields}
    token = _request_fields.set(merged)
    try:
        yield merged
    finally:
        _request_fields.reset(token)


def current_context() -> dict[str, Any]:
    """Fields bound by the enclosing `log_context` blocks."""
    return dict(_request_fields.get())


class JsonFormatter(logging.Formatter):
    """One JSON object per record; non-serializable values fall back to str()."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "@timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_request_fields.get())
        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class StructuredLogger:
    """
    Thin wrapper over `logging.Logger` taking fields as keyword arguments.

    Usage:
        log = StructuredLogger(__name__)
        with log_context(method="GET", url="/posts/1"):
            log.debug("Storage request", payload=None)
    """

    __slots__ = ("_logger", "_bound")

    context = staticmethod(log_context)

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)
        self._bound: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **fields: Any) -> StructuredLogger:
        """Copy of this logger that adds `fields` to every record."""
        child = StructuredLogger(self._logger.name)
        child._bound = {**self._bound, **fields}
        return child

    def log(self, level: LogLevel, message: str, **fields: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, extra={**self._bound, **fields})

    def debug(self, message: str, **fields: Any) -> None:
        self.log(LogLevel.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self.log(LogLevel.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.log(LogLevel.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.log(LogLevel.ERROR, message, **fields)


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
    quiet: Iterable[str] = ("redis", "asyncio"),
) -> None:
    """
    Route the root logger to one stream handler.

    Existing root handlers are replaced. Loggers named in `quiet` are
    raised to WARNING.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        JsonFormatter() if json_output
        else logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
