"""
Configuration Management for the Local Storage Adapter

Provides validated configuration with sensible defaults.
Supports environment variable overrides.

Design:
- Immutable after validation
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from localstore.core import constants as C
from localstore.core.errors import ConfigurationError
from localstore.core.types import Result, Ok, Err
from localstore.storage.config import StorageConfig


@dataclass(frozen=True)
class AdapterConfig:
    """
    Root configuration for one adapter instance.

    Attributes:
        namespace: Prefix of every storage key ("" for none).
        model_namespace: URL segment folded into the type
            ("/ns/posts/1" -> type "ns/posts"). None disables folding.
        debug: Log every dispatched request at DEBUG.
        persist_index: Mirror type indices into storage so a fresh
            adapter can enumerate records written by an earlier one.
        storage: Backend selection.
    """

    namespace: str = C.DEFAULT_NAMESPACE
    model_namespace: Optional[str] = None
    debug: bool = False
    persist_index: bool = False
    storage: StorageConfig = field(default_factory=StorageConfig)

    @classmethod
    def from_env(cls) -> Result[AdapterConfig, ConfigurationError]:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with LOCALSTORE_.
        Example: LOCALSTORE_NAMESPACE, LOCALSTORE_DEBUG,
        LOCALSTORE_STORAGE_BACKEND
        """
        def _get(key: str, default: str = "") -> str:
            return os.getenv(f"{C.ENV_PREFIX}_{key}", default)

        def _get_bool(key: str, default: bool) -> bool:
            val = _get(key).lower()
            return val in ("true", "1", "yes") if val else default

        try:
            storage = StorageConfig.from_env(prefix=f"{C.ENV_PREFIX}_STORAGE")
        except ValueError as e:
            return Err(ConfigurationError.invalid("storage", str(e)))

        return Ok(cls(
            namespace=_get("NAMESPACE", C.DEFAULT_NAMESPACE),
            model_namespace=_get("MODEL_NAMESPACE") or None,
            debug=_get_bool("DEBUG", False),
            persist_index=_get_bool("PERSIST_INDEX", False),
            storage=storage,
        ))

    def validate(self) -> Result[None, ConfigurationError]:
        """Validate configuration invariants."""
        if C.KEY_SEPARATOR in self.namespace:
            return Err(ConfigurationError.invalid(
                "namespace", f"must not contain '{C.KEY_SEPARATOR}'",
            ))
        if self.model_namespace is not None:
            if not self.model_namespace:
                return Err(ConfigurationError.invalid("model_namespace", "must not be empty"))
            if C.URL_SEPARATOR in self.model_namespace:
                return Err(ConfigurationError.invalid(
                    "model_namespace", f"must not contain '{C.URL_SEPARATOR}'",
                ))
        return Ok(None)
