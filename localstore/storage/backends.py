"""
In-Memory Storage Backend: Development and Testing Implementation

Process-local implementation of the StorageBackend contract, shaped
after the browser's localStorage: a flat str -> str map with insertion
order preserved.

Performance Characteristics:
    - get/set/delete: O(1) average case

Author: localstore maintainers
License: MIT
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional


class InMemoryStorage:
    """
    In-memory key-value store.

    Values must be strings; anything else is rejected so behaviour
    matches persistent backends, which only hold text.

    Example:
        storage = InMemoryStorage()
        storage.set("posts-1", '{"type": "posts", "id": "1"}')
        storage.get("posts-1")
    """

    __slots__ = ("_data",)

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"value for '{key}' must be str, got {type(value).__name__}")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"InMemoryStorage(entries={len(self._data)})"
