"""
Adapter errors.

One `LocalStoreError` subclass per subsystem, each built through
classmethods named after the failure (`RequestError.not_found(...)`).
Handlers raise them; the dispatcher and the adapter hand them back to
callers inside `Err(...)`:

    result = await adapter.find_record("posts", "1")
    match result:
        case Ok(payload):
            render(payload["data"])
        case Err(RequestError() as error) if error.status == 404:
            render_missing()
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from localstore.core import constants as C


class ErrorCode(Enum):
    """Stable numeric codes; the thousands digit names the subsystem."""

    # 1xxx request dispatch
    REQUEST_NOT_FOUND = 1001
    REQUEST_UNSUPPORTED_METHOD = 1002
    REQUEST_MALFORMED_PAYLOAD = 1003

    # 2xxx query filtering
    QUERY_INVALID_PREDICATE_SHAPE = 2001
    QUERY_INVALID_FRAGMENT = 2002

    # 3xxx storage backends
    STORAGE_CORRUPTION = 3001
    STORAGE_CONNECTION_FAILED = 3002
    STORAGE_OPERATION_FAILED = 3003

    # 4xxx import / export
    TRANSFER_INVALID_CONTENT = 4001
    TRANSFER_WRITE_FAILED = 4002

    # 9xxx configuration
    INTERNAL_CONFIGURATION_ERROR = 9001


@dataclass
class LocalStoreError(Exception):
    """
    Base of every adapter error.

    `status` is set only for request-level failures (404, 405, 400).
    `error_id` ties a returned error to the log line that reported it.
    """

    code: ErrorCode
    message: str
    status: Optional[int] = None
    cause: Optional[Exception] = None
    context: dict[str, Any] = field(default_factory=dict)
    error_id: str = field(default_factory=lambda: uuid4().hex)
    timestamp_ns: int = field(default_factory=time.time_ns)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe view for logs. The cause is left out."""
        data: dict[str, Any] = {
            "code": self.code.name,
            "message": self.message,
            "context": self.context,
            "error_id": self.error_id,
            "timestamp_ns": self.timestamp_ns,
        }
        if self.status is not None:
            data["status"] = self.status
        return data

    def __str__(self) -> str:
        return f"{self.code.name}: {self.message} [{self.error_id[:8]}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.name}, {self.message!r})"


# =============================================================================
# REQUEST ERRORS (DISPATCHER)
# =============================================================================
@dataclass
class RequestError(LocalStoreError):
    """
    Errors raised while dispatching a request.

    Covers missing records, unknown methods and malformed write payloads.
    """

    @classmethod
    def not_found(cls, method: str, url: str) -> RequestError:
        """Single-resource fetch for a key absent from storage."""
        return cls(
            code=ErrorCode.REQUEST_NOT_FOUND,
            message="Not found",
            status=C.STATUS_NOT_FOUND,
            context={"method": method, "url": url},
        )

    @classmethod
    def unsupported_method(cls, method: str, url: str) -> RequestError:
        """No handler is registered for the method."""
        return cls(
            code=ErrorCode.REQUEST_UNSUPPORTED_METHOD,
            message=f"There is nothing to handle {method} requests to {url}",
            status=C.STATUS_METHOD_NOT_ALLOWED,
            context={"method": method, "url": url},
        )

    @classmethod
    def malformed_payload(
        cls,
        method: str,
        url: Optional[str],
        reason: str,
        cause: Optional[Exception] = None,
    ) -> RequestError:
        """Write payload lacks data/type/id."""
        return cls(
            code=ErrorCode.REQUEST_MALFORMED_PAYLOAD,
            message=f"Malformed {method} payload: {reason}",
            status=C.STATUS_BAD_REQUEST,
            cause=cause,
            context={"method": method, "url": url, "reason": reason},
        )


# =============================================================================
# QUERY ERRORS (FILTER ENGINE)
# =============================================================================
@dataclass
class QueryError(LocalStoreError):
    """
    Errors from the query filter engine.

    Both variants are caller programming errors and are never retried.
    """

    @classmethod
    def invalid_predicate_shape(cls, description: str) -> QueryError:
        """Sequence predicate applied to a single (belongsTo) fragment."""
        return cls(
            code=ErrorCode.QUERY_INVALID_PREDICATE_SHAPE,
            message=(
                "You can not provide an array with a belongsTo relation. "
                f"Query: {description}"
            ),
            context={"query": description},
        )

    @classmethod
    def invalid_fragment(cls, value: Any) -> QueryError:
        """Record fragment is neither a resource nor a collection."""
        return cls(
            code=ErrorCode.QUERY_INVALID_FRAGMENT,
            message=f"Cannot filter a {type(value).__name__} fragment",
            context={"value": str(value)[:100]},
        )


# =============================================================================
# STORAGE ERRORS
# =============================================================================
@dataclass
class StorageError(LocalStoreError):
    """
    Errors from key-value storage backends.

    Covers unreadable entries and backend connectivity.
    """

    @classmethod
    def corruption(
        cls,
        key: str,
        cause: Optional[Exception] = None,
    ) -> StorageError:
        """Stored entry could not be decoded."""
        return cls(
            code=ErrorCode.STORAGE_CORRUPTION,
            message=f"Stored entry '{key}' is not valid JSON",
            cause=cause,
            context={"key": key},
        )

    @classmethod
    def connection_failed(
        cls,
        address: str,
        cause: Optional[Exception] = None,
    ) -> StorageError:
        """Backend unreachable, or used before connecting."""
        return cls(
            code=ErrorCode.STORAGE_CONNECTION_FAILED,
            message=f"Failed to connect to storage at {address}",
            cause=cause,
            context={"address": address},
        )

    @classmethod
    def operation_failed(
        cls,
        operation: str,
        key: str,
        cause: Optional[Exception] = None,
    ) -> StorageError:
        """A get/set/delete call raised inside the backend."""
        return cls(
            code=ErrorCode.STORAGE_OPERATION_FAILED,
            message=f"Storage {operation} failed for '{key}'",
            cause=cause,
            context={"operation": operation, "key": key},
        )


# =============================================================================
# TRANSFER ERRORS (IMPORT/EXPORT)
# =============================================================================
@dataclass
class TransferError(LocalStoreError):
    """Errors from bulk import and export."""

    @classmethod
    def invalid_content(
        cls,
        reason: str,
        cause: Optional[Exception] = None,
    ) -> TransferError:
        """Import content could not be decoded into {data: [...]}."""
        return cls(
            code=ErrorCode.TRANSFER_INVALID_CONTENT,
            message=f"Invalid import content: {reason}",
            cause=cause,
            context={"reason": reason},
        )

    @classmethod
    def write_failed(
        cls,
        path: str,
        cause: Optional[Exception] = None,
    ) -> TransferError:
        """Export file could not be written."""
        return cls(
            code=ErrorCode.TRANSFER_WRITE_FAILED,
            message=f"Failed to write export to {path}",
            cause=cause,
            context={"path": path},
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================
@dataclass
class ConfigurationError(LocalStoreError):
    """Invalid adapter configuration."""

    @classmethod
    def invalid(cls, setting: str, reason: str) -> ConfigurationError:
        return cls(
            code=ErrorCode.INTERNAL_CONFIGURATION_ERROR,
            message=f"Invalid setting '{setting}': {reason}",
            context={"setting": setting, "reason": reason},
        )
