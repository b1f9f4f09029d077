"""
Local Storage Adapter: Remote-API Facade over Key-Value Storage

Composes three collaborators and exposes them as capability protocols:
- RequestDispatcher -> RecordStore (find/query/create/update/delete)
- QueryFilterEngine -> QueryFilterable
- RecordTransfer    -> BulkTransferable (export/import)

Every operation resolves to a Result; nothing raises across this surface
except programming errors.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from localstore.core import constants as C
from localstore.core.config import AdapterConfig
from localstore.core.errors import LocalStoreError, QueryError
from localstore.core.types import Err, Ok, RecordData, Result
from localstore.api.dispatcher import RequestDispatcher
from localstore.api.router import MethodKind, build_url
from localstore.api.transfer import ExportContent, ImportContent, RecordTransfer
from localstore.query.engine import QueryFilterEngine
from localstore.query.naming import NamingService
from localstore.storage import create_storage
from localstore.storage.index import IndexManager
from localstore.storage.protocols import StorageBackend

logger = logging.getLogger(__name__)


class LocalStorageAdapter:
    """
    CRUD, query and bulk transfer over one storage backend.

    Example:
        adapter = LocalStorageAdapter(config=AdapterConfig(namespace="app"))

        await adapter.create_record({"data": {
            "type": "posts", "id": "1",
            "attributes": {"title": "Hello"}, "relationships": {},
        }})
        result = await adapter.query("posts", {"filter": {"title": "Hello"}})
        result.unwrap()["data"]  # [post]
    """

    __slots__ = ("_config", "_storage", "_engine", "_dispatcher", "_transfer")

    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        config: Optional[AdapterConfig] = None,
        naming: Optional[NamingService] = None,
    ) -> None:
        """
        Args:
            storage: Backend to use. Built from `config.storage` when omitted.
            config: Adapter configuration (defaults: no namespace, in-memory).
            naming: Naming service for filter key mapping.
        """
        self._config = config or AdapterConfig()
        self._storage = storage if storage is not None else create_storage(self._config.storage)
        self._engine = QueryFilterEngine(naming)
        self._dispatcher = RequestDispatcher(
            self._storage,
            config=self._config,
            indices=IndexManager(),
            engine=self._engine,
        )
        self._transfer = RecordTransfer(self._dispatcher)

    @classmethod
    def from_config(
        cls,
        config: AdapterConfig,
        naming: Optional[NamingService] = None,
    ) -> Result[LocalStorageAdapter, LocalStoreError]:
        """Validate configuration, then build the adapter."""
        validation = config.validate()
        if validation.is_err():
            return validation
        return Ok(cls(config=config, naming=naming))

    @property
    def config(self) -> AdapterConfig:
        return self._config

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    @property
    def indices(self) -> IndexManager:
        return self._dispatcher.indices

    @property
    def dispatcher(self) -> RequestDispatcher:
        return self._dispatcher

    def storage_key(self, resource_type: str, resource_id: str) -> str:
        return self._dispatcher.storage_key(resource_type, resource_id)

    def build_url(self, resource_type: str, resource_id: Optional[str] = None) -> str:
        return build_url(resource_type, resource_id)

    # -------------------------------------------------------------------------
    # RecordStore Implementation
    # -------------------------------------------------------------------------

    async def handle_request(
        self,
        url: Optional[str],
        method: str,
        data: Any = None,
    ) -> Result[dict[str, Any], LocalStoreError]:
        """Raw entry point: any method, any url."""
        return await self._dispatcher.dispatch(url, method, data)

    async def find_record(
        self,
        resource_type: str,
        resource_id: str,
    ) -> Result[dict[str, Any], LocalStoreError]:
        return await self.handle_request(
            self.build_url(resource_type, resource_id), MethodKind.GET.value,
        )

    async def find_all(
        self,
        resource_type: str,
    ) -> Result[dict[str, Any], LocalStoreError]:
        return await self.handle_request(self.build_url(resource_type), MethodKind.GET.value)

    async def query(
        self,
        resource_type: str,
        query: Mapping[str, Any],
    ) -> Result[dict[str, Any], LocalStoreError]:
        """Collection fetch narrowed by query["filter"]."""
        return await self.handle_request(
            self.build_url(resource_type), MethodKind.GET.value, query,
        )

    async def query_record(
        self,
        resource_type: str,
        query: Mapping[str, Any],
    ) -> Result[dict[str, Any], LocalStoreError]:
        """First record matching the query, or {"data": None}."""
        result = await self.query(resource_type, query)
        return result.map(
            lambda payload: {C.DATA_MEMBER: (payload[C.DATA_MEMBER] or [None])[0]}
        )

    async def create_record(
        self,
        payload: Mapping[str, Any],
    ) -> Result[dict[str, Any], LocalStoreError]:
        return await self.handle_request(
            self._payload_url(payload, with_id=False), MethodKind.POST.value, payload,
        )

    async def update_record(
        self,
        payload: Mapping[str, Any],
    ) -> Result[dict[str, Any], LocalStoreError]:
        return await self.handle_request(
            self._payload_url(payload, with_id=True), MethodKind.PATCH.value, payload,
        )

    async def delete_record(
        self,
        resource_type: str,
        resource_id: str,
    ) -> Result[dict[str, Any], LocalStoreError]:
        return await self.handle_request(
            self.build_url(resource_type, resource_id), MethodKind.DELETE.value,
        )

    # -------------------------------------------------------------------------
    # QueryFilterable Implementation
    # -------------------------------------------------------------------------

    def query_filter(
        self,
        record: RecordData,
        predicate: Mapping[str, Any],
    ) -> Result[bool, LocalStoreError]:
        try:
            return Ok(self._engine.record_matches(record, predicate))
        except QueryError as e:
            return Err(e)

    # -------------------------------------------------------------------------
    # BulkTransferable Implementation
    # -------------------------------------------------------------------------

    async def export_data(
        self,
        types: Iterable[str],
        *,
        as_json: bool = True,
        compress: bool = False,
        path: Optional[Path] = None,
    ) -> Result[ExportContent, LocalStoreError]:
        return await self._transfer.export_data(
            types, as_json=as_json, compress=compress, path=path,
        )

    async def import_data(
        self,
        content: ImportContent,
        *,
        truncate: bool = True,
    ) -> Result[int, LocalStoreError]:
        return await self._transfer.import_data(content, truncate=truncate)

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    def _payload_url(self, payload: Mapping[str, Any], with_id: bool) -> Optional[str]:
        # Malformed payloads still reach the dispatcher, which reports them
        record = payload.get(C.DATA_MEMBER) if isinstance(payload, Mapping) else None
        if not isinstance(record, Mapping) or "type" not in record:
            return None
        return self.build_url(record["type"], record.get("id") if with_id else None)

    def __repr__(self) -> str:
        return f"LocalStorageAdapter(storage={self._storage!r}, namespace={self._config.namespace!r})"
