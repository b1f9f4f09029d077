"""
Type Index: Ordered Storage-Key Sets per Resource Type

Tracks which storage keys hold records of each type so collection
fetches can enumerate them without scanning the backend.

Invariants:
    - Each key appears at most once per type
    - Iteration order is insertion order
    - Indices live in memory only; the adapter keeps them in step with
      storage and persists snapshots itself when asked to

Complexity:
    - add / remove / contains: O(1) average case
    - iteration: O(n) in index size
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator

from localstore.core.types import StorageKey


class KeyIndex:
    """
    Insertion-ordered set of storage keys.

    Backed by a dict so membership is O(1) and order is preserved.
    """

    __slots__ = ("_keys",)

    def __init__(self, keys: Iterable[StorageKey] = ()) -> None:
        self._keys: Dict[StorageKey, None] = dict.fromkeys(keys)

    def add(self, key: StorageKey) -> bool:
        """Append key. Returns False when it was already present."""
        if key in self._keys:
            return False
        self._keys[key] = None
        return True

    def discard(self, key: StorageKey) -> bool:
        """Remove key. Returns False when it was absent."""
        if key not in self._keys:
            return False
        del self._keys[key]
        return True

    def clear(self) -> None:
        self._keys.clear()

    def to_list(self) -> list[StorageKey]:
        return list(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[StorageKey]:
        # Snapshot so callers may mutate the index while iterating
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"KeyIndex({list(self._keys)!r})"


class IndexManager:
    """
    Per-type key indices owned by one adapter instance.

    Usage:
        indices = IndexManager()
        indices.add("posts", "app-posts-1")
        indices.contains("posts", "app-posts-1")  # True
        list(indices.index_for("posts"))          # ["app-posts-1"]
    """

    __slots__ = ("_indices",)

    def __init__(self) -> None:
        self._indices: Dict[str, KeyIndex] = {}

    def index_for(self, resource_type: str) -> KeyIndex:
        """Index of a type, created empty on first reference."""
        index = self._indices.get(resource_type)
        if index is None:
            index = KeyIndex()
            self._indices[resource_type] = index
        return index

    def is_loaded(self, resource_type: str) -> bool:
        """Whether the type has been referenced on this instance yet."""
        return resource_type in self._indices

    def contains(self, resource_type: str, key: StorageKey) -> bool:
        return key in self.index_for(resource_type)

    def add(self, resource_type: str, key: StorageKey) -> bool:
        """Append key unless present. Returns True when the index changed."""
        return self.index_for(resource_type).add(key)

    def remove(self, resource_type: str, key: StorageKey) -> bool:
        """Remove key if present. Returns True when the index changed."""
        return self.index_for(resource_type).discard(key)

    def reset(self, resource_type: str) -> list[StorageKey]:
        """Drop every key of a type, returning what was dropped."""
        index = self.index_for(resource_type)
        dropped = index.to_list()
        index.clear()
        return dropped

    def restore(self, resource_type: str, keys: Iterable[StorageKey]) -> KeyIndex:
        """Replace a type's index with keys from a persisted snapshot."""
        index = KeyIndex(keys)
        self._indices[resource_type] = index
        return index

    def types(self) -> list[str]:
        return list(self._indices)
