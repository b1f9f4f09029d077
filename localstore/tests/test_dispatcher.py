"""
Unit Tests: Request Dispatcher

Tests:
    - Write / read round trip and namespaced storage keys
    - Collection fetch order and filtering
    - Delete removes both the index entry and the stored record
    - Index idempotence across repeated writes
    - Index/storage divergence on enumeration
    - Error outcomes: 404, unsupported method, malformed payload, corruption
    - Persisted indices shared between dispatcher instances
"""

import asyncio
import json
import logging
import re
from datetime import date

import pytest

from localstore.api.dispatcher import RequestDispatcher
from localstore.core.config import AdapterConfig
from localstore.core.errors import ErrorCode, RequestError, StorageError
from localstore.storage.backends import InMemoryStorage


def make_record(resource_id, resource_type="posts", **attributes):
    return {
        "type": resource_type,
        "id": resource_id,
        "attributes": attributes,
        "relationships": {},
    }


def make_dispatcher(**config):
    return RequestDispatcher(InMemoryStorage(), config=AdapterConfig(**config))


def dispatch(dispatcher, url, method, data=None):
    return asyncio.run(dispatcher.dispatch(url, method, data))


class TestWriteAndRead:
    """Tests for POST/PATCH followed by GET."""

    def test_round_trip(self):
        dispatcher = make_dispatcher(namespace="app")
        record = make_record("1", title="Hello")

        created = dispatch(dispatcher, "/posts", "POST", {"data": record})
        assert created.is_ok()
        assert created.unwrap() == {"data": None}

        fetched = dispatch(dispatcher, "/posts/1", "GET")
        assert fetched.unwrap() == {"data": record}

    def test_storage_layout(self):
        dispatcher = make_dispatcher(namespace="app")
        record = make_record("1", title="Hello")
        dispatch(dispatcher, "/posts", "POST", {"data": record})

        assert json.loads(dispatcher.storage.get("app-posts-1")) == record
        assert dispatcher.indices.index_for("posts").to_list() == ["app-posts-1"]

    def test_patch_overwrites(self):
        dispatcher = make_dispatcher()
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("1", title="Old")})
        dispatch(dispatcher, "/posts/1", "PATCH", {"data": make_record("1", title="New")})

        fetched = dispatch(dispatcher, "/posts/1", "GET").unwrap()["data"]
        assert fetched["attributes"]["title"] == "New"
        assert dispatcher.indices.index_for("posts").to_list() == ["posts-1"]

    def test_write_uses_payload_identity_not_url(self):
        dispatcher = make_dispatcher()
        dispatch(dispatcher, "/ignored", "POST", {"data": make_record("1")})
        assert dispatcher.storage.get("posts-1") is not None

    def test_lowercase_method(self):
        dispatcher = make_dispatcher()
        assert dispatch(dispatcher, "/posts", "post", {"data": make_record("1")}).is_ok()
        assert dispatch(dispatcher, "/posts/1", "get").is_ok()


class TestCollections:
    """Tests for collection fetches."""

    def test_index_order(self):
        dispatcher = make_dispatcher()
        for resource_id in ("3", "1", "2"):
            dispatch(dispatcher, "/posts", "POST", {"data": make_record(resource_id)})

        records = dispatch(dispatcher, "/posts", "GET").unwrap()["data"]
        assert [record["id"] for record in records] == ["3", "1", "2"]

    def test_types_are_isolated(self):
        dispatcher = make_dispatcher()
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("1")})
        dispatch(dispatcher, "/comments", "POST", {"data": make_record("1", "comments")})

        records = dispatch(dispatcher, "/posts", "GET").unwrap()["data"]
        assert [record["type"] for record in records] == ["posts"]

    def test_empty_collection(self):
        assert dispatch(make_dispatcher(), "/posts", "GET").unwrap() == {"data": []}

    def test_repeated_writes_index_once(self):
        dispatcher = make_dispatcher()
        for _ in range(3):
            dispatch(dispatcher, "/posts", "POST", {"data": make_record("1")})

        assert len(dispatcher.indices.index_for("posts")) == 1
        assert len(dispatch(dispatcher, "/posts", "GET").unwrap()["data"]) == 1

    def test_filter(self):
        dispatcher = make_dispatcher()
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("1", title="Hello")})
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("2", title="World")})

        result = dispatch(dispatcher, "/posts", "GET", {"filter": {"title": re.compile("^W")}})
        assert [record["id"] for record in result.unwrap()["data"]] == ["2"]

    def test_falsy_filter_returns_everything(self):
        dispatcher = make_dispatcher()
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("1")})

        result = dispatch(dispatcher, "/posts", "GET", {"filter": None})
        assert len(result.unwrap()["data"]) == 1

    def test_missing_entry_skipped(self):
        """An indexed key whose stored entry vanished is left out, not reported."""
        dispatcher = make_dispatcher()
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("1")})
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("2")})
        dispatcher.storage.delete("posts-1")

        records = dispatch(dispatcher, "/posts", "GET").unwrap()["data"]
        assert [record["id"] for record in records] == ["2"]

    def test_model_namespace(self):
        dispatcher = make_dispatcher(model_namespace="admin")
        record = make_record("1", "admin/posts")
        dispatch(dispatcher, "/admin/posts", "POST", {"data": record})

        assert dispatch(dispatcher, "/admin/posts/1", "GET").unwrap() == {"data": record}
        assert dispatch(dispatcher, "/admin/posts", "GET").unwrap() == {"data": [record]}


class TestDelete:
    """Tests for DELETE."""

    def test_removes_index_and_record(self):
        dispatcher = make_dispatcher(namespace="app")
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("1")})

        result = dispatch(dispatcher, "/posts/1", "DELETE")

        assert result.unwrap() == {"data": None}
        assert dispatcher.storage.get("app-posts-1") is None
        assert "app-posts-1" not in dispatcher.indices.index_for("posts")
        assert dispatch(dispatcher, "/posts", "GET").unwrap() == {"data": []}

    def test_delete_absent_succeeds(self):
        assert dispatch(make_dispatcher(), "/posts/9", "DELETE").is_ok()

    def test_delete_collection_rejected(self):
        result = dispatch(make_dispatcher(), "/posts", "DELETE")
        assert result.is_err()
        assert result.error.code == ErrorCode.REQUEST_MALFORMED_PAYLOAD


class TestErrors:
    """Tests for failure outcomes."""

    def test_not_found(self):
        result = dispatch(make_dispatcher(), "/posts/1", "GET")

        assert result.is_err()
        error = result.error
        assert isinstance(error, RequestError)
        assert error.status == 404
        assert error.message == "Not found"
        assert error.context == {"method": "GET", "url": "/posts/1"}

    def test_empty_stored_value_is_not_found(self):
        dispatcher = make_dispatcher()
        dispatcher.storage.set("posts-1", "")
        assert dispatch(dispatcher, "/posts/1", "GET").error.status == 404

    def test_unsupported_method(self):
        result = dispatch(make_dispatcher(), "/posts/1", "PUT")

        assert result.is_err()
        assert result.error.code == ErrorCode.REQUEST_UNSUPPORTED_METHOD
        assert result.error.message == "There is nothing to handle PUT requests to /posts/1"

    @pytest.mark.parametrize("payload", [
        None,
        {},
        {"data": None},
        {"data": {"id": "1"}},
        {"data": {"type": "posts"}},
        {"data": {"type": "posts", "id": None}},
    ])
    def test_malformed_payload(self, payload):
        dispatcher = make_dispatcher()
        result = dispatch(dispatcher, "/posts", "POST", payload)

        assert result.is_err()
        assert result.error.code == ErrorCode.REQUEST_MALFORMED_PAYLOAD
        assert result.error.status == 400
        assert len(dispatcher.storage) == 0

    def test_unserializable_payload(self):
        dispatcher = make_dispatcher(persist_index=True)
        record = make_record("1", published=date(2020, 1, 1))

        result = dispatch(dispatcher, "/posts", "POST", {"data": record})

        assert result.is_err()
        assert result.error.code == ErrorCode.REQUEST_MALFORMED_PAYLOAD
        assert isinstance(result.error.cause, TypeError)
        assert len(dispatcher.indices.index_for("posts")) == 0
        assert len(dispatcher.storage) == 0

    def test_corrupt_entry(self):
        dispatcher = make_dispatcher()
        dispatcher.storage.set("posts-1", "{not json")

        result = dispatch(dispatcher, "/posts/1", "GET")
        assert isinstance(result.error, StorageError)
        assert result.error.code == ErrorCode.STORAGE_CORRUPTION

    def test_debug_logging(self, caplog):
        dispatcher = make_dispatcher(debug=True)
        with caplog.at_level("DEBUG", logger="localstore.api.dispatcher"):
            dispatch(dispatcher, "/posts/1", "GET")

        messages = [record.getMessage() for record in caplog.records]
        assert "Storage request" in messages

    def test_debug_flag_is_per_instance(self, caplog):
        logger = logging.getLogger("localstore.api.dispatcher")
        level = logger.level
        make_dispatcher(debug=True)
        assert logger.level == level

        quiet = make_dispatcher()
        with caplog.at_level("DEBUG", logger="localstore.api.dispatcher"):
            dispatch(quiet, "/posts/1", "GET")
        assert "Storage request" not in [record.getMessage() for record in caplog.records]


class TestTruncate:
    """Tests for per-type truncation."""

    def test_truncate(self):
        dispatcher = make_dispatcher()
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("1")})
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("2")})
        dispatch(dispatcher, "/comments", "POST", {"data": make_record("1", "comments")})

        assert dispatcher.truncate("posts") == 2
        assert dispatcher.storage.get("posts-1") is None
        assert dispatcher.storage.get("comments-1") is not None
        assert len(dispatcher.indices.index_for("posts")) == 0


class TestPersistedIndex:
    """Tests for index snapshots kept in storage."""

    def test_snapshot_written(self):
        dispatcher = make_dispatcher(namespace="app", persist_index=True)
        dispatch(dispatcher, "/posts", "POST", {"data": make_record("1")})

        snapshot = dispatcher.storage.get("app-__index__-posts")
        assert json.loads(snapshot) == ["app-posts-1"]

    def test_fresh_instance_sees_records(self):
        storage = InMemoryStorage()
        config = AdapterConfig(persist_index=True)
        first = RequestDispatcher(storage, config=config)
        dispatch(first, "/posts", "POST", {"data": make_record("1")})
        dispatch(first, "/posts", "POST", {"data": make_record("2")})
        dispatch(first, "/posts/1", "DELETE")

        second = RequestDispatcher(storage, config=config)
        records = dispatch(second, "/posts", "GET").unwrap()["data"]
        assert [record["id"] for record in records] == ["2"]

    def test_not_persisted_by_default(self):
        storage = InMemoryStorage()
        dispatch(RequestDispatcher(storage), "/posts", "POST", {"data": make_record("1")})

        assert dispatch(RequestDispatcher(storage), "/posts", "GET").unwrap() == {"data": []}
        assert list(storage.keys()) == ["posts-1"]
