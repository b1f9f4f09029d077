"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundational abstractions for the adapter:
- Result/Either monad for exception-free control flow
- Error hierarchy with classmethod constructors per failure
- Configuration management with validation
"""

from localstore.core.types import (
    Result,
    Ok,
    Err,
    RecordData,
    StorageKey,
    ResourceRef,
)
from localstore.core.errors import (
    ErrorCode,
    LocalStoreError,
    RequestError,
    QueryError,
    StorageError,
    TransferError,
    ConfigurationError,
)
from localstore.core.config import AdapterConfig

__all__ = [
    "Result",
    "Ok",
    "Err",
    "RecordData",
    "StorageKey",
    "ResourceRef",
    "ErrorCode",
    "LocalStoreError",
    "RequestError",
    "QueryError",
    "StorageError",
    "TransferError",
    "ConfigurationError",
    "AdapterConfig",
]
