# tests/integration/cache/test_int_redis_cache.py
"""Integration tests for RedisCacheStore against a Redis container."""

from __future__ import annotations

import asyncio

import pytest
from bson import ObjectId

from docstore.cache.cached_store import CachedDocumentStore
from docstore.cache.redis_store import RedisCacheStore
from docstore.storage.memory_store import InMemoryDocumentStore

pytestmark = pytest.mark.redis


class TestRedisCacheStore:

    @pytest.mark.asyncio
    async def test_set_get_delete(self, redis_url, redis_key_prefix):
        store = RedisCacheStore(redis_url=redis_url, key_prefix=redis_key_prefix)
        try:
            oid = ObjectId()
            await store.set("findOne.users.x", {"_id": oid, "n": 1}, ttl_s=30)
            assert await store.get("findOne.users.x") == {"_id": oid, "n": 1}
            await store.delete("findOne.users.x")
            assert await store.get("findOne.users.x") is None
        finally:
            await store.clear()
            await store.close()

    @pytest.mark.asyncio
    async def test_expiry(self, redis_url, redis_key_prefix):
        store = RedisCacheStore(redis_url=redis_url, key_prefix=redis_key_prefix)
        try:
            await store.set("count.users.{}", 3, ttl_s=0.2)
            await asyncio.sleep(0.5)
            assert await store.get("count.users.{}") is None
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_clear_scoped_to_prefix(self, redis_url, redis_key_prefix):
        mine = RedisCacheStore(redis_url=redis_url, key_prefix=redis_key_prefix)
        other = RedisCacheStore(redis_url=redis_url, key_prefix=f"{redis_key_prefix}other:")
        try:
            await other.set("k", 1, ttl_s=30)
            await mine.set("k", 2, ttl_s=30)
            await other.clear()
            assert await mine.get("k") == 2
        finally:
            await mine.clear()
            await mine.close()
            await other.close()

    @pytest.mark.asyncio
    async def test_shared_between_decorators(self, redis_url, redis_key_prefix, sample_user, user_id):
        backend = InMemoryDocumentStore()
        first = CachedDocumentStore(backend, RedisCacheStore(redis_url=redis_url, key_prefix=redis_key_prefix))
        second = CachedDocumentStore(backend, RedisCacheStore(redis_url=redis_url, key_prefix=redis_key_prefix))
        try:
            await first.add_object("users", sample_user)
            await first.update_object_by_id("users", user_id, {"age": 7})
            found = await second.find_object_by_id("users", user_id)
            assert found == {**sample_user, "age": 7}
        finally:
            await first.reset_cache()
            await first.close()
            await second.close()
