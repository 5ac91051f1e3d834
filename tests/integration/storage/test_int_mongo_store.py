# tests/integration/storage/test_int_mongo_store.py
"""Integration tests for MongoDocumentStore against a MongoDB container."""

from __future__ import annotations

import pytest
from bson import ObjectId

from docstore.cache.cached_store import CachedDocumentStore
from docstore.cache.memory_cache_store import MemoryCacheStore
from docstore.core.codec import UNDEFINED
from docstore.core.errors import DuplicateIdentifierError, NotFoundError
from docstore.storage.mongo_store import MongoDocumentStore

pytestmark = pytest.mark.mongodb


class TestMongoDocumentStore:

    @pytest.mark.asyncio
    async def test_crud_lifecycle(self, mongodb_url, mongodb_database, sample_user, user_id):
        store = MongoDocumentStore(url=mongodb_url, database=mongodb_database)
        try:
            await store.init(["users"])
            await store.init(["users"])

            stored = await store.add_object("users", sample_user)
            assert stored["_id"] == user_id
            with pytest.raises(DuplicateIdentifierError):
                await store.add_object("users", sample_user)

            await store.update_object_by_id("users", str(user_id), {"age": 40, "tags": UNDEFINED})
            found = await store.find_object_by_id("users", user_id)
            assert found["age"] == 40
            assert "tags" not in found

            with pytest.raises(NotFoundError):
                await store.update_object_by_id("users", ObjectId(), {"age": 1})

            await store.delete_object_by_id("users", user_id)
            assert await store.find_object_by_id("users", user_id) is None
        finally:
            await store._client.drop_database(mongodb_database)
            await store.close()

    @pytest.mark.asyncio
    async def test_queries_and_composites(self, mongodb_url, mongodb_database, sample_users):
        store = MongoDocumentStore(url=mongodb_url, database=mongodb_database)
        try:
            await store.init(["users"])
            await store.add_multiple_objects("users", sample_users)
            assert await store.count_objects("users", {"team": "core"}) == 2
            found = await store.find_objects("users", {"age": {"$gte": 36}})
            assert sorted(d["name"] for d in found) == ["Ada", "Grace"]

            assert await store.delete_objects("users", {"team": "core"}) == 2
            deleted = await store.find_object_and_delete("users", {"name": "Linus"})
            assert deleted["name"] == "Linus"
            assert await store.count_objects("users", {}) == 0
        finally:
            await store._client.drop_database(mongodb_database)
            await store.close()

    @pytest.mark.asyncio
    async def test_behind_cache(self, mongodb_url, mongodb_database, sample_user, user_id):
        backend = MongoDocumentStore(url=mongodb_url, database=mongodb_database)
        store = CachedDocumentStore(backend, MemoryCacheStore())
        try:
            await store.init(["users"])
            await store.add_object("users", sample_user)
            merged = await store.add_or_update_object("users", {"_id": user_id, "age": 1})
            assert (await store.find_object_by_id("users", user_id))["age"] == 1
            assert (await backend.find_object_by_id("users", user_id))["age"] == 1
            assert merged["name"] == "Ada"
        finally:
            await backend._client.drop_database(mongodb_database)
            await store.close()
