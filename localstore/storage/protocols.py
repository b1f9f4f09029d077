"""
Protocol Definitions: Storage Contract and Adapter Capabilities

Structural subtyping protocols (PEP 544):
- StorageBackend: synchronous string-keyed get/set/delete primitive
- RecordStore: single/collection fetch, create, update, delete
- QueryFilterable: predicate matching over stored records
- BulkTransferable: export and import of whole record sets

The adapter implements the three capability protocols by delegating to
its dispatcher, filter engine and transfer service rather than by
inheriting their behaviour.

Author: localstore maintainers
License: MIT
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import (
    Any,
    Iterable,
    Mapping,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from localstore.core.errors import LocalStoreError
from localstore.core.types import RecordData, Result


# =============================================================================
# STORAGE BACKEND
# =============================================================================
@runtime_checkable
class StorageBackend(Protocol):
    """
    Flat key-value storage primitive.

    All methods are synchronous. Keys and values are strings; absence is
    reported as None, never as an exception.

    Example:
        class DictStorage:
            def get(self, key: str) -> Optional[str]: ...
            def set(self, key: str, value: str) -> None: ...
            def delete(self, key: str) -> None: ...
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string or None."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Insert or overwrite."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the key. No-op when absent."""
        ...


# =============================================================================
# ADAPTER CAPABILITIES
# =============================================================================
@runtime_checkable
class RecordStore(Protocol):
    """
    Remote-API-shaped CRUD over stored records.

    Reads resolve to {"data": record | [record] | None}; writes resolve to
    {"data": None}. Failures resolve to Err(LocalStoreError).
    """

    @abstractmethod
    async def find_record(
        self,
        resource_type: str,
        resource_id: str,
    ) -> Result[dict[str, Any], LocalStoreError]:
        ...

    @abstractmethod
    async def find_all(
        self,
        resource_type: str,
    ) -> Result[dict[str, Any], LocalStoreError]:
        ...

    @abstractmethod
    async def query(
        self,
        resource_type: str,
        query: Mapping[str, Any],
    ) -> Result[dict[str, Any], LocalStoreError]:
        ...

    @abstractmethod
    async def query_record(
        self,
        resource_type: str,
        query: Mapping[str, Any],
    ) -> Result[dict[str, Any], LocalStoreError]:
        ...

    @abstractmethod
    async def create_record(
        self,
        payload: Mapping[str, Any],
    ) -> Result[dict[str, Any], LocalStoreError]:
        ...

    @abstractmethod
    async def update_record(
        self,
        payload: Mapping[str, Any],
    ) -> Result[dict[str, Any], LocalStoreError]:
        ...

    @abstractmethod
    async def delete_record(
        self,
        resource_type: str,
        resource_id: str,
    ) -> Result[dict[str, Any], LocalStoreError]:
        ...


@runtime_checkable
class QueryFilterable(Protocol):
    """Predicate matching over a single stored record."""

    @abstractmethod
    def query_filter(
        self,
        record: RecordData,
        predicate: Mapping[str, Any],
    ) -> Result[bool, LocalStoreError]:
        ...


@runtime_checkable
class BulkTransferable(Protocol):
    """Export and import of every record of a set of types."""

    @abstractmethod
    async def export_data(
        self,
        types: Iterable[str],
        *,
        as_json: bool = True,
        compress: bool = False,
        path: Optional[Path] = None,
    ) -> Result[Union[dict[str, Any], str, bytes], LocalStoreError]:
        ...

    @abstractmethod
    async def import_data(
        self,
        content: Union[Mapping[str, Any], str, bytes],
        *,
        truncate: bool = True,
    ) -> Result[int, LocalStoreError]:
        ...
