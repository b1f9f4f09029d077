"""
Request Dispatcher: Remote-API Semantics over a Key-Value Store

Routes a (method, url, data) request to one of four synchronous handlers
and hands the outcome back through an awaitable:

- GET /type/id   -> stored record, or RequestError 404
- GET /type      -> every indexed record, optionally filtered
- POST / PATCH   -> index + store payload["data"]
- DELETE /type/id -> unindex + remove

Index and storage writes are two separate steps. A key left in the index
without a stored entry is skipped on enumeration, never reported.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Mapping, Optional

from localstore.core import constants as C
from localstore.core.config import AdapterConfig
from localstore.core.errors import LocalStoreError, RequestError, StorageError
from localstore.core.types import (
    Err,
    Ok,
    RecordData,
    ResourceRef,
    Result,
    StorageKey,
)
from localstore.api.router import MethodKind, Request
from localstore.observability.logging import StructuredLogger
from localstore.query.engine import QueryFilterEngine
from localstore.storage.index import IndexManager, KeyIndex
from localstore.storage.keys import build_index_key, build_key
from localstore.storage.protocols import StorageBackend

logger = logging.getLogger(__name__)

# Handler signature: (request) -> response data
RequestHandler = Callable[[Request], Any]


class RequestDispatcher:
    """
    Method-table dispatcher over one storage backend.

    Usage:
        dispatcher = RequestDispatcher(InMemoryStorage())
        await dispatcher.dispatch("/posts", "POST", {"data": post})
        result = await dispatcher.dispatch("/posts/1", "GET")
        result.unwrap()["data"]  # post
    """

    __slots__ = ("_storage", "_config", "_indices", "_engine", "_handlers", "_log")

    def __init__(
        self,
        storage: StorageBackend,
        *,
        config: Optional[AdapterConfig] = None,
        indices: Optional[IndexManager] = None,
        engine: Optional[QueryFilterEngine] = None,
    ) -> None:
        self._storage = storage
        self._config = config or AdapterConfig()
        self._indices = indices if indices is not None else IndexManager()
        self._engine = engine or QueryFilterEngine()
        self._handlers: dict[MethodKind, RequestHandler] = {
            MethodKind.GET: self._handle_get,
            MethodKind.POST: self._handle_write,
            MethodKind.PATCH: self._handle_write,
            MethodKind.DELETE: self._handle_delete,
        }
        self._log = StructuredLogger(__name__)

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    @property
    def indices(self) -> IndexManager:
        return self._indices

    @property
    def engine(self) -> QueryFilterEngine:
        return self._engine

    @property
    def config(self) -> AdapterConfig:
        return self._config

    def storage_key(self, resource_type: str, resource_id: str) -> StorageKey:
        return build_key(self._config.namespace, resource_type, resource_id)

    # -------------------------------------------------------------------------
    # DISPATCH
    # -------------------------------------------------------------------------

    async def dispatch(
        self,
        url: Optional[str],
        method: str,
        data: Any = None,
    ) -> Result[dict[str, Any], LocalStoreError]:
        """
        Run one request and resolve to {"data": ...} or the failure.

        Yields to the event loop once before handling so callers observe
        the same ordering as a remote round trip.
        """
        request = Request(method=method, url=url, data=data)

        if self._config.debug:
            self._log.debug("Storage request", method=method, url=url, payload=data)

        await asyncio.sleep(0)

        kind = request.kind
        if kind is None:
            logger.warning("No handler for %s %s", method, url)
            return Err(RequestError.unsupported_method(method, str(url)))

        with StructuredLogger.context(method=kind.value, url=url):
            try:
                response = self._handlers[kind](request)
            except LocalStoreError as e:
                if self._config.debug:
                    self._log.debug("Storage request failed", error=e.to_dict())
                return Err(e)

        return Ok({C.DATA_MEMBER: response})

    # -------------------------------------------------------------------------
    # HANDLERS
    # -------------------------------------------------------------------------

    def _handle_get(self, request: Request) -> Any:
        target = request.target(self._config.model_namespace)

        if not target.is_collection:
            key = self.storage_key(target.resource_type, target.resource_id)
            raw = self._storage.get(key)
            if not raw:
                raise RequestError.not_found(MethodKind.GET.value, str(request.url))
            return self._decode(key, raw)

        records = self.load_collection(target.resource_type)

        query = request.data
        if isinstance(query, Mapping) and query.get(C.FILTER_MEMBER):
            return self._engine.filter_records(records, query[C.FILTER_MEMBER])

        return records

    def _handle_write(self, request: Request) -> None:
        target = self.payload_target(request)
        key = self.storage_key(target.resource_type, target.resource_id)
        serialized = self._encode(request)

        if self._index_for(target.resource_type).add(key):
            self._save_index(target.resource_type)
        self._storage.set(key, serialized)

        return None

    def _handle_delete(self, request: Request) -> None:
        target = request.target(self._config.model_namespace)
        if target.is_collection:
            raise RequestError.malformed_payload(
                MethodKind.DELETE.value, request.url, "url does not name a resource id",
            )
        key = self.storage_key(target.resource_type, target.resource_id)

        if self._index_for(target.resource_type).discard(key):
            self._save_index(target.resource_type)
        self._storage.delete(key)

        return None

    # -------------------------------------------------------------------------
    # COLLECTIONS AND INDICES
    # -------------------------------------------------------------------------

    def load_collection(self, resource_type: str) -> list[RecordData]:
        """Every stored record of a type, in index order."""
        records: list[RecordData] = []
        for key in self._index_for(resource_type):
            raw = self._storage.get(key)
            if not raw:
                logger.warning("Index entry %s has no stored record, skipping", key)
                continue
            records.append(self._decode(key, raw))
        return records

    def truncate(self, resource_type: str) -> int:
        """Delete every stored record of a type and empty its index."""
        self._index_for(resource_type)
        dropped = self._indices.reset(resource_type)
        for key in dropped:
            self._storage.delete(key)
        self._save_index(resource_type)
        logger.info("Truncated %d %s record(s)", len(dropped), resource_type)
        return len(dropped)

    def _index_for(self, resource_type: str) -> KeyIndex:
        if self._config.persist_index and not self._indices.is_loaded(resource_type):
            index_key = build_index_key(self._config.namespace, resource_type)
            raw = self._storage.get(index_key)
            if raw:
                return self._indices.restore(resource_type, self._decode(index_key, raw))
        return self._indices.index_for(resource_type)

    def _save_index(self, resource_type: str) -> None:
        if not self._config.persist_index:
            return
        index_key = build_index_key(self._config.namespace, resource_type)
        self._storage.set(index_key, json.dumps(self._indices.index_for(resource_type).to_list()))

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    @staticmethod
    def _decode(key: str, raw: str) -> Any:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Stored entry %s is not valid JSON", key)
            raise StorageError.corruption(key, e) from e

    @staticmethod
    def _encode(request: Request) -> str:
        try:
            return json.dumps(request.data[C.DATA_MEMBER])
        except (TypeError, ValueError) as e:
            raise RequestError.malformed_payload(
                request.method.upper(), request.url, f"data is not JSON serializable: {e}", e,
            ) from e

    @staticmethod
    def payload_target(request: Request) -> ResourceRef:
        """
        Identity of a write payload.

        Raises:
            RequestError: payload has no data object, or data lacks type/id.
        """
        payload = request.data
        method = request.method.upper()
        if not isinstance(payload, Mapping) or not isinstance(payload.get(C.DATA_MEMBER), Mapping):
            raise RequestError.malformed_payload(method, request.url, "payload has no data object")
        try:
            target = ResourceRef.from_record(payload[C.DATA_MEMBER])
        except KeyError as e:
            raise RequestError.malformed_payload(
                method, request.url, f"data is missing '{e.args[0]}'", e,
            ) from e
        if target.resource_id is None:
            raise RequestError.malformed_payload(method, request.url, "data id is null")
        return target
