"""
Predicate and Fragment Variants

Filters arrive as plain JSON-like values and records as plain mappings.
Both are lifted into tagged variants before matching so the engine can
dispatch on shape with structural pattern matching:

Predicates:
    FieldsPredicate   {"title": ..., "author": ...}   mapping of key -> predicate
    AllOfPredicate    [{...}, {...}]                  every element must hold
    ValuePredicate    "Hello" / 5 / None / True       strict equality leaf
    PatternPredicate  re.compile("^He")               regex search leaf

Fragments:
    ResourceFragment    a record or a belongsTo reference
    CollectionFragment  a hasMany reference list
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Union

from localstore.core.errors import QueryError


# =============================================================================
# PREDICATES
# =============================================================================
@dataclass(frozen=True, slots=True)
class FieldsPredicate:
    """Mapping predicate: every key must match."""
    fields: tuple[tuple[str, "Predicate"], ...]

    def to_raw(self) -> dict[str, Any]:
        return {key: value.to_raw() for key, value in self.fields}


@dataclass(frozen=True, slots=True)
class AllOfPredicate:
    """Sequence predicate: every element must be satisfied."""
    items: tuple["Predicate", ...]

    def to_raw(self) -> list[Any]:
        return [item.to_raw() for item in self.items]


@dataclass(frozen=True, slots=True)
class ValuePredicate:
    """Scalar leaf compared with strict equality."""
    value: Any

    def to_raw(self) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class PatternPredicate:
    """Regex leaf, searched against the value's text form."""
    pattern: re.Pattern

    def to_raw(self) -> re.Pattern:
        return self.pattern


Predicate = Union[FieldsPredicate, AllOfPredicate, ValuePredicate, PatternPredicate]
LeafPredicate = Union[ValuePredicate, PatternPredicate]


def parse_predicate(raw: Any) -> Predicate:
    """Lift a raw filter value into its predicate variant."""
    if isinstance(raw, Mapping):
        return FieldsPredicate(
            fields=tuple((str(key), parse_predicate(value)) for key, value in raw.items())
        )
    if isinstance(raw, (list, tuple)):
        return AllOfPredicate(items=tuple(parse_predicate(item) for item in raw))
    if isinstance(raw, re.Pattern):
        return PatternPredicate(pattern=raw)
    return ValuePredicate(value=raw)


# =============================================================================
# FRAGMENTS
# =============================================================================
@dataclass(frozen=True, slots=True)
class ResourceFragment:
    """Single resource: a stored record or a {type, id} reference."""
    data: Mapping[str, Any]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(frozen=True, slots=True)
class CollectionFragment:
    """Ordered references of a hasMany relationship."""
    items: tuple[Any, ...]


Fragment = Union[ResourceFragment, CollectionFragment]


def parse_fragment(raw: Any) -> Fragment:
    """
    Lift record data into its fragment variant.

    Raises:
        QueryError: raw is neither a mapping nor a sequence.
    """
    if isinstance(raw, Mapping):
        return ResourceFragment(data=raw)
    if isinstance(raw, (list, tuple)):
        return CollectionFragment(items=tuple(raw))
    raise QueryError.invalid_fragment(raw)
