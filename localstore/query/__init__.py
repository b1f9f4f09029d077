"""
Query module: predicate matching for filtered collection fetches.
"""

from localstore.query.engine import QueryFilterEngine, matches, strict_equals
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

__all__ = [
    "QueryFilterEngine",
    "matches",
    "strict_equals",
    "InflectionNaming",
    "NamingService",
    "AllOfPredicate",
    "CollectionFragment",
    "FieldsPredicate",
    "Fragment",
    "PatternPredicate",
    "Predicate",
    "ResourceFragment",
    "ValuePredicate",
    "parse_fragment",
    "parse_predicate",
]
