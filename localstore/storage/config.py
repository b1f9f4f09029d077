"""
Backend selection and Redis connection settings.

Both dataclasses are frozen and check themselves on construction, so an
invalid setting fails where it is read rather than on first request.
Environment loading lives next to each class:

    LOCALSTORE_STORAGE_BACKEND=redis
    REDIS_URL=redis://cache:6379/2        # or REDIS_HOST / REDIS_PORT / REDIS_DB

Author: localstore maintainers
License: MIT
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _env(prefix: str, name: str) -> Optional[str]:
    """Value of `{prefix}_{name}`, None when unset or blank."""
    value = os.environ.get(f"{prefix}_{name}", "").strip()
    return value or None


def _env_flag(prefix: str, name: str, default: bool) -> bool:
    value = (_env(prefix, name) or "").lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default


class BackendType(Enum):
    """Where records are kept. Value is the name accepted from the environment."""
    IN_MEMORY = "in_memory"
    REDIS = "redis"
    VALKEY = "valkey"

    @classmethod
    def from_name(cls, name: Optional[str]) -> BackendType:
        """Lenient lookup; unknown or missing names select IN_MEMORY."""
        normalized = (name or "").lower().replace("-", "_")
        if normalized == "memory":
            return cls.IN_MEMORY
        try:
            return cls(normalized)
        except ValueError:
            return cls.IN_MEMORY

    @property
    def needs_server(self) -> bool:
        return self is not BackendType.IN_MEMORY


@dataclass(frozen=True, slots=True)
class RedisConfig:
    """
    How to reach a Redis or Valkey server.

    `url` takes precedence over host/port/db when given
    (redis://[user:password@]host:port/db, rediss:// for TLS).
    One `timeout_s` bounds both connecting and each command.
    """

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = False
    timeout_s: float = 5.0
    url: Optional[str] = None

    def __post_init__(self) -> None:
        problems = []
        if self.url is not None and not self.url.startswith(("redis://", "rediss://", "unix://")):
            problems.append(f"url must use redis://, rediss:// or unix://, got {self.url!r}")
        if not 0 < self.port < 65536:
            problems.append(f"port out of range: {self.port}")
        if self.db < 0:
            problems.append(f"db must not be negative: {self.db}")
        if self.timeout_s <= 0:
            problems.append(f"timeout_s must be positive: {self.timeout_s}")
        if problems:
            raise ValueError("; ".join(problems))

    @classmethod
    def from_env(cls, prefix: str = "REDIS") -> RedisConfig:
        """
        Read {prefix}_URL, _HOST, _PORT, _DB, _USERNAME, _PASSWORD, _TLS
        and _TIMEOUT_S. Unset variables keep the class defaults.
        """
        defaults = cls()
        port = _env(prefix, "PORT")
        db = _env(prefix, "DB")
        timeout = _env(prefix, "TIMEOUT_S")
        return cls(
            host=_env(prefix, "HOST") or defaults.host,
            port=int(port) if port else defaults.port,
            db=int(db) if db else defaults.db,
            username=_env(prefix, "USERNAME"),
            password=_env(prefix, "PASSWORD"),
            use_tls=_env_flag(prefix, "TLS", defaults.use_tls),
            timeout_s=float(timeout) if timeout else defaults.timeout_s,
            url=_env(prefix, "URL"),
        )

    def client_kwargs(self) -> Dict[str, Any]:
        """
        Keyword arguments shared by `redis.Redis(...)` and
        `redis.Redis.from_url(url, ...)`.

        Responses are always decoded since stored values are text.
        """
        kwargs: Dict[str, Any] = {
            "decode_responses": True,
            "socket_timeout": self.timeout_s,
            "socket_connect_timeout": self.timeout_s,
        }
        if self.url is None:
            kwargs.update(host=self.host, port=self.port, db=self.db, ssl=self.use_tls)
        if self.username:
            kwargs["username"] = self.username
        if self.password:
            kwargs["password"] = self.password
        return kwargs

    @property
    def address(self) -> str:
        """Printable target, without credentials."""
        if self.url is not None:
            return self.url.rpartition("@")[2]
        return f"{self.host}:{self.port}/{self.db}"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Backend choice plus the Redis settings a server backend needs."""

    backend: BackendType = BackendType.IN_MEMORY
    redis_config: Optional[RedisConfig] = None

    def __post_init__(self) -> None:
        if self.backend.needs_server and self.redis_config is None:
            raise ValueError(f"{self.backend.value} backend needs a redis_config")

    @classmethod
    def for_development(cls) -> StorageConfig:
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "LOCALSTORE_STORAGE") -> StorageConfig:
        """{prefix}_BACKEND picks the backend; REDIS_* configure a server backend."""
        backend = BackendType.from_name(_env(prefix, "BACKEND"))
        return cls(
            backend=backend,
            redis_config=RedisConfig.from_env() if backend.needs_server else None,
        )


__all__ = [
    "BackendType",
    "RedisConfig",
    "StorageConfig",
]
