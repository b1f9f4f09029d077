"""
Storage Module: Key-Value Persistence Layer
===========================================

Provides:
- StorageBackend protocol and the adapter capability protocols
- In-memory backend for development/testing
- Redis backend for shared, persistent storage
- Storage key construction and per-type key indices
- Factory function for backend selection

Design Principles:
-----------------
1. **Backend Agnostic**: Same contract for in-memory and Redis
2. **Factory Pattern**: Runtime backend selection via configuration
3. **Lazy Loading**: The redis client is imported only when used

Example:
    >>> storage = create_storage()
    >>> from localstore.storage.config import RedisConfig
    >>> storage = create_storage(StorageConfig(
    ...     backend=BackendType.REDIS, redis_config=RedisConfig(host="redis.prod")))
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from localstore.storage.protocols import (
    StorageBackend,
    RecordStore,
    QueryFilterable,
    BulkTransferable,
)
from localstore.storage.backends import InMemoryStorage
from localstore.storage.config import (
    BackendType,
    RedisConfig,
    StorageConfig,
)
from localstore.storage.index import IndexManager, KeyIndex
from localstore.storage.keys import build_key, build_index_key

if TYPE_CHECKING:
    from localstore.storage.redis_store import RedisStorage


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def create_storage(config: Optional[StorageConfig] = None) -> StorageBackend:
    """
    Create a storage backend.

    Args:
        config: Backend selection. None means in-memory.

    Returns:
        InMemoryStorage: If config is None or selects IN_MEMORY.
        RedisStorage: If config selects REDIS/VALKEY. Call `connect()`
            before handing it to an adapter.
    """
    if config is None or config.backend == BackendType.IN_MEMORY:
        return InMemoryStorage()

    from localstore.storage.redis_store import RedisStorage
    return RedisStorage(config.redis_config)


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = [
    # Protocols
    "StorageBackend",
    "RecordStore",
    "QueryFilterable",
    "BulkTransferable",
    # Configuration
    "BackendType",
    "RedisConfig",
    "StorageConfig",
    # Backends
    "InMemoryStorage",
    # Keys and indices
    "IndexManager",
    "KeyIndex",
    "build_key",
    "build_index_key",
    # Factory
    "create_storage",
]
