"""
Bulk Transfer: Export and Import of Whole Record Sets

Export gathers every record of the requested types into a single
{"data": [...]} document; import replays such a document through the
dispatcher as POST requests, optionally wiping the affected types first.

Documents travel as mappings, JSON text, or lz4-frame compressed JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

import lz4.frame

from localstore.core import constants as C
from localstore.core.errors import LocalStoreError, RequestError, TransferError
from localstore.core.types import Err, Ok, RecordData, Result
from localstore.api.dispatcher import RequestDispatcher
from localstore.api.router import MethodKind, Request, build_url

logger = logging.getLogger(__name__)

ExportContent = Union[dict[str, Any], str, bytes]
ImportContent = Union[Mapping[str, Any], str, bytes]


class RecordTransfer:
    """
    Import/export service bound to one dispatcher.

    Usage:
        transfer = RecordTransfer(dispatcher)
        dump = (await transfer.export_data(["posts", "comments"])).unwrap()
        await transfer.import_data(dump, truncate=True)
    """

    __slots__ = ("_dispatcher",)

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher

    async def export_data(
        self,
        types: Iterable[str],
        *,
        as_json: bool = True,
        compress: bool = False,
        path: Optional[Path] = None,
    ) -> Result[ExportContent, LocalStoreError]:
        """
        Collect every record of `types`.

        Returns lz4-compressed bytes when `compress`, JSON text when
        `as_json`, otherwise the {"data": [...]} mapping. When `path` is
        given the serialized document is also written there.
        """
        records: list[RecordData] = []
        for resource_type in types:
            result = await self._dispatcher.dispatch(build_url(resource_type), MethodKind.GET.value)
            if result.is_err():
                return result
            records.extend(result.unwrap()[C.DATA_MEMBER])

        document: dict[str, Any] = {C.DATA_MEMBER: records}
        if not (as_json or compress or path is not None):
            return Ok(document)

        text = json.dumps(document)
        serialized: Union[str, bytes] = (
            lz4.frame.compress(text.encode("utf-8")) if compress else text
        )

        if path is not None:
            try:
                if isinstance(serialized, bytes):
                    Path(path).write_bytes(serialized)
                else:
                    Path(path).write_text(serialized, encoding="utf-8")
            except OSError as e:
                return Err(TransferError.write_failed(str(path), e))
            logger.info("Exported %d record(s) to %s", len(records), path)

        if compress or as_json:
            return Ok(serialized)
        return Ok(document)

    async def import_data(
        self,
        content: ImportContent,
        *,
        truncate: bool = True,
    ) -> Result[int, LocalStoreError]:
        """
        Store every record of an exported document.

        Every record is checked first; an invalid document changes nothing.
        With `truncate`, each type present in the document is then emptied
        (storage and index) before any record is written.

        Returns:
            Ok(count) of imported records.
        """
        decoded = self._decode(content)
        if decoded.is_err():
            return decoded
        records = decoded.unwrap()

        if truncate:
            for resource_type in dict.fromkeys(record["type"] for record in records):
                self._dispatcher.truncate(resource_type)

        for record in records:
            result = await self._dispatcher.dispatch(
                None, MethodKind.POST.value, {C.DATA_MEMBER: record},
            )
            if result.is_err():
                return result

        logger.info("Imported %d record(s)", len(records))
        return Ok(len(records))

    @staticmethod
    def _decode(content: ImportContent) -> Result[list[RecordData], TransferError]:
        try:
            if isinstance(content, (bytes, bytearray)):
                raw = bytes(content)
                if raw.startswith(C.LZ4_FRAME_MAGIC):
                    raw = lz4.frame.decompress(raw)
                document = json.loads(raw.decode("utf-8"))
            elif isinstance(content, str):
                document = json.loads(content)
            else:
                document = content
        except (RuntimeError, UnicodeDecodeError, json.JSONDecodeError) as e:
            return Err(TransferError.invalid_content(str(e), e))

        if not isinstance(document, Mapping):
            return Err(TransferError.invalid_content("document is not an object"))

        records = document.get(C.DATA_MEMBER)
        if not isinstance(records, list):
            return Err(TransferError.invalid_content("'data' is not an array"))

        for position, record in enumerate(records):
            request = Request(MethodKind.POST.value, None, {C.DATA_MEMBER: record})
            try:
                RequestDispatcher.payload_target(request)
                json.dumps(record)
            except RequestError as e:
                return Err(TransferError.invalid_content(f"record {position}: {e.message}", e))
            except (TypeError, ValueError) as e:
                return Err(TransferError.invalid_content(
                    f"record {position} is not JSON serializable", e,
                ))

        return Ok(records)
