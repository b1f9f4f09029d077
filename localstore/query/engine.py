"""
Query Filter Engine: Recursive Predicate Matching over Stored Records

Case table (predicate shape x fragment shape):

| predicate | fragment   | behaviour                                         |
|-----------|------------|---------------------------------------------------|
| fields    | resource   | AND over keys: attribute leaf or relationship     |
| fields    | collection | any element matches                               |
| all-of    | resource   | QueryError (array against a belongsTo)            |
| all-of    | collection | every item matched by at least one element        |
| leaf      | resource   | leaf-match the fragment's id                      |
| leaf      | collection | any element matches                               |

Leaf matching: regex -> search against text; anything else -> strict
equality with no coercion between text, numbers and booleans.

A predicate key that names neither an attribute nor a relationship
present on the record fails, same as a relationship whose data is empty.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from localstore.core import constants as C
from localstore.core.errors import QueryError
from localstore.core.types import RecordData
from localstore.query.naming import InflectionNaming, NamingService
from localstore.query.predicate import (
    AllOfPredicate,
    CollectionFragment,
    FieldsPredicate,
    Fragment,
    PatternPredicate,
    Predicate,
    ResourceFragment,
    ValuePredicate,
    parse_fragment,
    parse_predicate,
)

logger = logging.getLogger(__name__)

_IDENTITY_KEYS = frozenset({"id", "type"})

# Distinguishes "attribute absent" from "attribute stored as null"
_MISSING = object()


# =============================================================================
# LEAF MATCHING
# =============================================================================
def as_text(value: Any) -> str:
    """Text form used for regex matching (JSON spelling of scalars)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def strict_equals(record_value: Any, predicate_value: Any) -> bool:
    """
    Equality without type coercion.

    Integers and floats are one number kind; booleans are never numbers;
    "1" never equals 1. Mappings and sequences compare element by element
    under the same rules.
    """
    if isinstance(record_value, Mapping) and isinstance(predicate_value, Mapping):
        return record_value.keys() == predicate_value.keys() and all(
            strict_equals(record_value[key], value) for key, value in predicate_value.items()
        )
    sequence = (list, tuple)
    if isinstance(record_value, sequence) and isinstance(predicate_value, sequence):
        return len(record_value) == len(predicate_value) and all(
            strict_equals(stored, wanted) for stored, wanted in zip(record_value, predicate_value)
        )
    if isinstance(record_value, bool) or isinstance(predicate_value, bool):
        return type(record_value) is type(predicate_value) and record_value == predicate_value
    number = (int, float)
    if isinstance(record_value, number) and isinstance(predicate_value, number):
        return record_value == predicate_value
    return type(record_value) is type(predicate_value) and record_value == predicate_value


def matches(record_value: Any, predicate: Predicate) -> bool:
    """Leaf-match a stored value against a predicate."""
    match predicate:
        case PatternPredicate(pattern=pattern):
            return pattern.search(as_text(record_value)) is not None
        case ValuePredicate(value=value):
            return strict_equals(record_value, value)
        case FieldsPredicate() | AllOfPredicate():
            return strict_equals(record_value, predicate.to_raw())
    raise TypeError(f"Unknown predicate variant: {type(predicate).__name__}")


def describe_predicate(predicate: AllOfPredicate) -> str:
    """'id: 1, id: 2' rendering of a sequence predicate for error messages."""
    parts: list[str] = []
    for item in predicate.to_raw():
        if isinstance(item, Mapping):
            parts.append(",".join(f"{key}: {as_text(value)}" for key, value in item.items()))
        else:
            parts.append(as_text(item))
    return ", ".join(parts)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (list, tuple, str)) and len(value) == 0)


# =============================================================================
# ENGINE
# =============================================================================
class QueryFilterEngine:
    """
    Matches stored records against nested filter predicates.

    Usage:
        engine = QueryFilterEngine()
        engine.record_matches(record, {"title": re.compile("^He")})
        engine.record_matches(record, {"comments": {"id": "5"}})

    Raises QueryError for an array predicate against a belongsTo and for
    fragments that are neither mappings nor sequences.
    """

    __slots__ = ("_naming",)

    def __init__(self, naming: Optional[NamingService] = None) -> None:
        self._naming = naming or InflectionNaming()

    @property
    def naming(self) -> NamingService:
        return self._naming

    def record_matches(self, record: RecordData, predicate: Any) -> bool:
        """Match one stored record against a raw filter value."""
        return self.match(parse_fragment(record), parse_predicate(predicate))

    def filter_records(
        self,
        records: Iterable[RecordData],
        predicate: Any,
    ) -> list[RecordData]:
        """Records matching a raw filter value, order preserved."""
        parsed = parse_predicate(predicate)
        return [
            record for record in records
            if self.match(parse_fragment(record), parsed)
        ]

    def match(self, fragment: Fragment, predicate: Predicate) -> bool:
        match (predicate, fragment):
            case (FieldsPredicate(fields=fields), ResourceFragment(data=data)):
                return all(self._match_field(data, key, value) for key, value in fields)

            case (FieldsPredicate(), CollectionFragment()):
                return self._any_element(fragment, predicate)

            case (AllOfPredicate(), ResourceFragment()):
                description = describe_predicate(predicate)
                logger.warning("Array predicate against belongsTo: %s", description)
                raise QueryError.invalid_predicate_shape(description)

            case (AllOfPredicate(items=items), CollectionFragment()):
                return all(self.match(fragment, item) for item in items)

            case (ValuePredicate() | PatternPredicate(), ResourceFragment(data=data)):
                return matches(data.get("id"), predicate)

            case (ValuePredicate() | PatternPredicate(), CollectionFragment()):
                return self._any_element(fragment, predicate)

        raise TypeError(
            f"Unhandled match: {type(predicate).__name__} x {type(fragment).__name__}"
        )

    def _any_element(self, fragment: CollectionFragment, predicate: Predicate) -> bool:
        return any(self.match(parse_fragment(item), predicate) for item in fragment.items)

    def _match_field(
        self,
        data: Mapping[str, Any],
        key: str,
        predicate: Predicate,
    ) -> bool:
        if key == "type" and isinstance(predicate, ValuePredicate) and isinstance(predicate.value, str):
            predicate = ValuePredicate(self._naming.pluralize(predicate.value))

        # Attributes
        if key in _IDENTITY_KEYS:
            record_value = data.get(key, _MISSING)
        else:
            attributes = data.get(C.ATTRIBUTES_MEMBER) or {}
            record_value = attributes.get(self._naming.key_for_attribute(key), _MISSING)

        if record_value is not _MISSING:
            return matches(record_value, predicate)

        # Relationships
        relationships = data.get(C.RELATIONSHIPS_MEMBER) or {}
        relationship = relationships.get(self._naming.key_for_relationship(key))
        if not isinstance(relationship, Mapping):
            return False

        related = relationship.get(C.DATA_MEMBER)
        if _is_empty(related):
            return False

        return self.match(parse_fragment(related), predicate)
