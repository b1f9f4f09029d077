"""
Unit Tests: Query Filter Engine

Tests:
    - Attribute equality and regex leaves
    - Strict equality (no text/number/boolean coercion)
    - belongsTo and hasMany relationship matching
    - Array predicates against belongsTo relationships
    - Type normalization
    - Absent and empty relationships
"""

import re

import pytest

from localstore.core.errors import ErrorCode, QueryError
from localstore.query.engine import QueryFilterEngine, as_text, strict_equals
from localstore.query.naming import InflectionNaming
from localstore.query.predicate import (
    AllOfPredicate,
    CollectionFragment,
    FieldsPredicate,
    PatternPredicate,
    ResourceFragment,
    ValuePredicate,
    parse_fragment,
    parse_predicate,
)


def make_post(**attributes):
    return {
        "type": "posts",
        "id": "1",
        "attributes": {
            "title": "Hello",
            "views": 3,
            "draft": None,
            "published": True,
            "created-at": "2020-01-01",
            **attributes,
        },
        "relationships": {
            "author": {"data": {"type": "users", "id": "7"}},
            "comments": {"data": [
                {"type": "comments", "id": "5"},
                {"type": "comments", "id": "6"},
            ]},
            "editor": {"data": None},
            "tags": {"data": []},
        },
    }


@pytest.fixture
def engine():
    return QueryFilterEngine()


class TestLeafHelpers:
    """Tests for leaf comparison helpers."""

    def test_strict_equals_rejects_coercion(self):
        assert not strict_equals("1", 1)
        assert not strict_equals(1, True)
        assert not strict_equals(0, False)
        assert not strict_equals(None, "")

    def test_strict_equals_numbers(self):
        assert strict_equals(3, 3.0)
        assert strict_equals(True, True)

    def test_strict_equals_containers(self):
        """Nested values follow the same no-coercion rules."""
        assert strict_equals({"flag": True, "tags": ["a", 1]}, {"tags": ["a", 1.0], "flag": True})
        assert not strict_equals({"flag": 1}, {"flag": True})
        assert not strict_equals([0], [False])
        assert not strict_equals({"n": "1"}, {"n": 1})
        assert not strict_equals({"a": 1, "b": 2}, {"a": 1})
        assert not strict_equals([1, 2], [1])

    def test_as_text(self):
        assert as_text(None) == "null"
        assert as_text(False) == "false"
        assert as_text(2.0) == "2"
        assert as_text(2.5) == "2.5"


class TestParsing:
    """Tests for predicate/fragment variants."""

    def test_predicate_shapes(self):
        assert isinstance(parse_predicate({"a": 1}), FieldsPredicate)
        assert isinstance(parse_predicate([1, 2]), AllOfPredicate)
        assert isinstance(parse_predicate(re.compile("x")), PatternPredicate)
        assert parse_predicate("x") == ValuePredicate("x")

    def test_predicate_to_raw(self):
        raw = {"comments": [{"id": "5"}, {"id": "6"}], "title": "Hello"}
        assert parse_predicate(raw).to_raw() == raw

    def test_fragment_shapes(self):
        assert isinstance(parse_fragment({"id": "1"}), ResourceFragment)
        assert isinstance(parse_fragment([{"id": "1"}]), CollectionFragment)

    def test_scalar_fragment_rejected(self):
        with pytest.raises(QueryError) as exc_info:
            parse_fragment(5)
        assert exc_info.value.code == ErrorCode.QUERY_INVALID_FRAGMENT


class TestAttributeMatching:
    """Tests for attribute leaves."""

    def test_equality(self, engine):
        assert engine.record_matches(make_post(), {"title": "Hello"})
        assert not engine.record_matches(make_post(), {"title": "hello"})

    def test_regex(self, engine):
        assert engine.record_matches(make_post(), {"title": re.compile("^He")})
        assert not engine.record_matches(make_post(), {"title": re.compile("^he")})

    def test_regex_against_number(self, engine):
        assert engine.record_matches(make_post(), {"views": re.compile(r"^3$")})

    def test_no_coercion(self, engine):
        """A text predicate never equals a numeric attribute."""
        assert not engine.record_matches(make_post(), {"views": "3"})
        assert engine.record_matches(make_post(), {"views": 3})
        assert not engine.record_matches(make_post(), {"published": 1})

    def test_null_attribute_is_matched(self, engine):
        assert engine.record_matches(make_post(), {"draft": None})
        assert not engine.record_matches(make_post(), {"draft": "x"})

    def test_camel_case_key_is_dasherized(self, engine):
        assert engine.record_matches(make_post(), {"createdAt": "2020-01-01"})

    def test_exact_keys_without_dasherizing(self):
        engine = QueryFilterEngine(InflectionNaming(dasherize_keys=False))
        assert not engine.record_matches(make_post(), {"createdAt": "2020-01-01"})
        assert engine.record_matches(make_post(), {"created-at": "2020-01-01"})

    def test_all_keys_must_match(self, engine):
        assert engine.record_matches(make_post(), {"title": "Hello", "views": 3})
        assert not engine.record_matches(make_post(), {"title": "Hello", "views": 4})

    def test_container_predicate_against_attribute(self, engine):
        post = make_post(meta={"flag": 1, "tags": ["x"]})
        assert engine.record_matches(post, {"meta": {"flag": 1, "tags": ["x"]}})
        assert not engine.record_matches(post, {"meta": {"flag": True, "tags": ["x"]}})
        assert not engine.record_matches(post, {"meta": {"flag": 1}})

    def test_unknown_key_fails(self, engine):
        assert not engine.record_matches(make_post(), {"subtitle": "x"})

    def test_identity_keys(self, engine):
        assert engine.record_matches(make_post(), {"id": "1"})
        assert not engine.record_matches(make_post(), {"id": 1})

    def test_type_is_pluralized(self, engine):
        assert engine.record_matches(make_post(), {"type": "post"})
        assert engine.record_matches(make_post(), {"type": "posts"})
        assert not engine.record_matches(make_post(), {"type": "comment"})


class TestRelationshipMatching:
    """Tests for belongsTo / hasMany traversal."""

    def test_belongs_to_by_id(self, engine):
        assert engine.record_matches(make_post(), {"author": "7"})
        assert not engine.record_matches(make_post(), {"author": "8"})

    def test_belongs_to_by_regex_on_id(self, engine):
        assert engine.record_matches(make_post(), {"author": re.compile("^7$")})

    def test_belongs_to_object(self, engine):
        assert engine.record_matches(make_post(), {"author": {"id": "7", "type": "user"}})
        assert not engine.record_matches(make_post(), {"author": {"id": "7", "type": "admin"}})

    def test_belongs_to_array_rejected(self, engine):
        with pytest.raises(QueryError) as exc_info:
            engine.record_matches(make_post(), {"author": [{"id": "1"}, {"id": "2"}]})

        error = exc_info.value
        assert error.code == ErrorCode.QUERY_INVALID_PREDICATE_SHAPE
        assert error.message == (
            "You can not provide an array with a belongsTo relation. Query: id: 1, id: 2"
        )

    def test_has_many_any_element(self, engine):
        assert engine.record_matches(make_post(), {"comments": {"id": "6"}})
        assert engine.record_matches(make_post(), {"comments": "5"})
        assert not engine.record_matches(make_post(), {"comments": {"id": "9"}})

    def test_has_many_all_of(self, engine):
        assert engine.record_matches(make_post(), {"comments": [{"id": "5"}, {"id": "6"}]})
        assert not engine.record_matches(make_post(), {"comments": [{"id": "5"}, {"id": "9"}]})

    def test_null_relationship_fails(self, engine):
        assert not engine.record_matches(make_post(), {"editor": {"id": "1"}})

    def test_empty_relationship_fails(self, engine):
        assert not engine.record_matches(make_post(), {"tags": {"id": "1"}})

    def test_absent_relationship_fails(self, engine):
        assert not engine.record_matches(make_post(), {"reviewer": {"id": "1"}})

    def test_attribute_shadows_relationship(self, engine):
        post = make_post(author="Ada")
        assert engine.record_matches(post, {"author": "Ada"})
        assert not engine.record_matches(post, {"author": "7"})


class TestFilterRecords:
    """Tests for collection filtering."""

    def test_order_preserved(self, engine):
        records = [make_post(title=title) | {"id": str(i)} for i, title in enumerate("BAB")]
        result = engine.filter_records(records, {"title": "B"})
        assert [record["id"] for record in result] == ["0", "2"]

    def test_empty_filter_object_matches_all(self, engine):
        records = [make_post(), make_post()]
        assert engine.filter_records(records, {}) == records
