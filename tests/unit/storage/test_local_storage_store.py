# tests/unit/storage/test_local_storage_store.py
"""Tests for storage/local_storage_store.py: storage layout and persistence."""

from __future__ import annotations

import json

import pytest
from bson import ObjectId

from docstore.core.errors import EncodingError
from docstore.storage.key_value_storage import FileKeyValueStorage, MemoryKeyValueStorage
from docstore.storage.local_storage_store import LocalStorageDocumentStore


class TestLayout:
    @pytest.mark.asyncio
    async def test_init_creates_index(self):
        kv = MemoryKeyValueStorage()
        store = LocalStorageDocumentStore(storage=kv, namespace="app")
        await store.init(["users"])
        assert kv.get_item("app.users") == "[]"

    @pytest.mark.asyncio
    async def test_document_stored_in_wire_form(self, user_id):
        kv = MemoryKeyValueStorage()
        store = LocalStorageDocumentStore(storage=kv, namespace="app")
        await store.init(["users"])
        owner = ObjectId()
        await store.add_object("users", {"_id": user_id, "owner": owner})
        assert json.loads(kv.get_item("app.users")) == [str(user_id)]
        assert json.loads(kv.get_item(f"app.users.{user_id}")) == {
            "_id": f"oid:{user_id}",
            "owner": f"oid:{owner}",
        }

    @pytest.mark.asyncio
    async def test_delete_updates_index(self, user_id):
        kv = MemoryKeyValueStorage()
        store = LocalStorageDocumentStore(storage=kv)
        await store.init(["users"])
        await store.add_object("users", {"_id": user_id})
        await store.delete_object_by_id("users", user_id)
        assert json.loads(kv.get_item("localstoragedb.users")) == []
        assert kv.get_item(f"localstoragedb.users.{user_id}") is None

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self):
        kv = MemoryKeyValueStorage()
        first = LocalStorageDocumentStore(storage=kv, namespace="a")
        second = LocalStorageDocumentStore(storage=kv, namespace="b")
        await first.init(["users"])
        await second.init(["users"])
        await first.add_object("users", {"name": "Ada"})
        assert await second.count_objects("users", {}) == 0


class TestRobustness:
    @pytest.mark.asyncio
    async def test_index_entry_without_document_is_skipped(self, user_id):
        kv = MemoryKeyValueStorage()
        store = LocalStorageDocumentStore(storage=kv)
        await store.init(["users"])
        await store.add_object("users", {"name": "Ada"})
        index = json.loads(kv.get_item("localstoragedb.users"))
        kv.set_item("localstoragedb.users", json.dumps([*index, str(user_id)]))
        assert await store.count_objects("users", {}) == 1

    @pytest.mark.asyncio
    async def test_corrupt_document_raises(self, user_id):
        kv = MemoryKeyValueStorage()
        store = LocalStorageDocumentStore(storage=kv)
        await store.init(["users"])
        await store.add_object("users", {"_id": user_id})
        kv.set_item(f"localstoragedb.users.{user_id}", "{not json")
        with pytest.raises(EncodingError):
            await store.find_object_by_id("users", user_id)


class TestPersistence:
    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path, sample_user, user_id):
        store = LocalStorageDocumentStore(storage=FileKeyValueStorage(tmp_path))
        await store.init(["users"])
        await store.add_object("users", sample_user)

        reopened = LocalStorageDocumentStore(storage=FileKeyValueStorage(tmp_path))
        await reopened.init(["users"])
        assert await reopened.find_object_by_id("users", user_id) == sample_user
