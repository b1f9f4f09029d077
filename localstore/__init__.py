"""
Local Storage Adapter

Serves remote-API-shaped requests from a key-value store:
- Records persist as JSON under "<namespace>-<type>-<id>" keys
- Per-type key indices make collection fetches possible without scans
- A recursive filter engine answers attribute/relationship queries
- Whole record sets export to (optionally lz4-compressed) JSON and back

Backends: in-memory for development and tests, Redis/Valkey for shared state.

Author: localstore maintainers
License: MIT
"""

__version__ = "1.0.0"
__author__ = "localstore maintainers"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from localstore.core.types import (
    Result,
    Ok,
    Err,
    RecordData,
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
from localstore.storage import (
    BackendType,
    InMemoryStorage,
    RedisConfig,
    StorageBackend,
    StorageConfig,
    create_storage,
)
from localstore.query import InflectionNaming, NamingService, QueryFilterEngine
from localstore.api import (
    LocalStorageAdapter,
    RecordTransfer,
    RequestDispatcher,
    build_url,
    parse_url,
)

__all__ = [
    # Version
    "__version__",
    # Core types
    "Result",
    "Ok",
    "Err",
    "RecordData",
    "ResourceRef",
    # Errors
    "ErrorCode",
    "LocalStoreError",
    "RequestError",
    "QueryError",
    "StorageError",
    "TransferError",
    "ConfigurationError",
    # Config
    "AdapterConfig",
    # Storage
    "BackendType",
    "InMemoryStorage",
    "RedisConfig",
    "StorageBackend",
    "StorageConfig",
    "create_storage",
    # Query
    "InflectionNaming",
    "NamingService",
    "QueryFilterEngine",
    # Adapter
    "LocalStorageAdapter",
    "RecordTransfer",
    "RequestDispatcher",
    "build_url",
    "parse_url",
]
