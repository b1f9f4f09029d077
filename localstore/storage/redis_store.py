"""
Redis Storage Backend
=====================

Redis/Valkey implementation of the StorageBackend contract.

Each storage key maps to a plain Redis string; no hashes, no TTLs.
The client is the synchronous redis-py client because the adapter's
storage contract is synchronous.

Thread Safety:
--------------
- Connection pool is thread-safe (redis-py internal locking)
- Instance methods hold no state besides the client reference

Author: localstore maintainers
License: MIT
"""

from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from localstore.core.errors import StorageError
from localstore.core.types import Result, Ok, Err
from localstore.storage.config import RedisConfig

if TYPE_CHECKING:
    import redis

logger = logging.getLogger(__name__)


class RedisStorage:
    """
    StorageBackend over a Redis server.

    get/set/delete raise StorageError.operation_failed when the server
    call fails; the dispatcher turns that into an Err.

    Example:
        >>> storage = RedisStorage(RedisConfig(host="redis.example.com"))
        >>> storage.connect()
        >>> storage.set("posts-1", "{...}")
        >>> storage.close()
    """

    __slots__ = ("_config", "_client")

    def __init__(
        self,
        config: RedisConfig,
        client: Optional["redis.Redis"] = None,
    ) -> None:
        """
        Args:
            config: Redis connection configuration.
            client: Pre-built client (tests, shared pools). When omitted,
                `connect()` must be called before use.
        """
        self._config = config
        self._client = client

    # -------------------------------------------------------------------------
    # CONNECTION MANAGEMENT
    # -------------------------------------------------------------------------

    def connect(self) -> Result[None, StorageError]:
        """Create the client and check the server answers PING."""
        import redis
        from redis.exceptions import RedisError

        config = self._config
        try:
            if config.url is not None:
                client = redis.Redis.from_url(config.url, **config.client_kwargs())
            else:
                client = redis.Redis(**config.client_kwargs())
            client.ping()
        except RedisError as e:
            logger.error("Redis connection failed: %s", config.address)
            return Err(StorageError.connection_failed(config.address, e))

        self._client = client
        logger.info("Connected to Redis at %s", config.address)
        return Ok(None)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def _require_client(self) -> "redis.Redis":
        if self._client is None:
            raise StorageError.connection_failed(self._config.address)
        return self._client

    # -------------------------------------------------------------------------
    # StorageBackend Implementation
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        from redis.exceptions import RedisError

        client = self._require_client()
        try:
            return client.get(key)
        except RedisError as e:
            raise StorageError.operation_failed("get", key, e) from e

    def set(self, key: str, value: str) -> None:
        from redis.exceptions import RedisError

        client = self._require_client()
        try:
            client.set(key, value)
        except RedisError as e:
            raise StorageError.operation_failed("set", key, e) from e

    def delete(self, key: str) -> None:
        from redis.exceptions import RedisError

        client = self._require_client()
        try:
            client.delete(key)
        except RedisError as e:
            raise StorageError.operation_failed("delete", key, e) from e

    def __repr__(self) -> str:
        return f"RedisStorage({self._config.address})"
