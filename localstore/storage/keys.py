"""
Storage key construction.

Keys are "<namespace>-<type>-<id>", or "<type>-<id>" without a namespace.
Neither type nor id is escaped: they must not contain the separator.
"""

from __future__ import annotations

from localstore.core import constants as C
from localstore.core.types import StorageKey


def build_key(namespace: str, resource_type: str, resource_id: str) -> StorageKey:
    """Deterministic storage key for (type, id) under a namespace."""
    key = f"{resource_type}{C.KEY_SEPARATOR}{resource_id}"
    if not namespace:
        return key
    return f"{namespace}{C.KEY_SEPARATOR}{key}"


def build_index_key(namespace: str, resource_type: str) -> StorageKey:
    """Key under which a persisted index snapshot of a type is stored."""
    return build_key(namespace, C.INDEX_KEY_SEGMENT, resource_type)
