"""
Observability module: structured logging.
"""

from localstore.observability.logging import (
    JsonFormatter,
    LogLevel,
    StructuredLogger,
    current_context,
    log_context,
    setup_logging,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "StructuredLogger",
    "current_context",
    "log_context",
    "setup_logging",
]
