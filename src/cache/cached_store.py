# src/cache/cached_store.py
"""Caching decorator over any BaseDocumentStore.

The wrapped (fallback) store stays the source of truth. Cache entries:

- ``findOne.<collection>.<hex id>``: one document, kept consistent with this
  process's writes (write-through on add, merge on update, invalidation on
  delete).
- ``findOne.<collection>.<query>``: the document a query matched. On a hit it
  is re-resolved through the by-id entry, so updates and deletes made by this
  process are visible; if the by-id entry is gone the lookup falls through.
- ``findMultiple.<collection>.<query>``: ordered ids of the matched documents,
  resolved through ``find_object_by_id`` on a hit.
- ``count.<collection>.<query>``: a scalar.

Writes never invalidate ``findMultiple`` or ``count`` entries: which queries a
write affects is unknown without re-evaluating every cached query, so those
entries are only eventually consistent, bounded by their TTL.

There is no per-identifier lock. A find miss racing with a write to the same
id can leave a stale by-id entry until its TTL expires or the next write to
that id.

Cache-layer failures (key derivation, cache store errors) are logged and
treated as a miss; fallback store errors always propagate.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from bson import ObjectId

from docstore.cache.base_cache_store import BaseCacheStore
from docstore.cache.keys import get_cache_key
from docstore.cache.models import CacheTtlPolicy
from docstore.core.codec import ensure_obj_has_id, ensure_object_id, remove_undefined_values
from docstore.core.errors import CacheStoreError, EncodingError
from docstore.core.models import (
    ID_FIELD,
    CacheOperation,
    Document,
    ObjectIdLike,
    Query,
)
from docstore.storage.base_document_store import BaseDocumentStore, gather_all

logger = logging.getLogger(__name__)


class CachedDocumentStore(BaseDocumentStore):
    """Document store that caches reads of a fallback store."""

    def __init__(
        self,
        fallback: BaseDocumentStore,
        cache: BaseCacheStore,
        ttl_policy: CacheTtlPolicy | None = None,
    ) -> None:
        """
        Args:
            fallback: Store used on cache misses and for every write.
            cache: Cache store owned by the caller (shared or per instance).
            ttl_policy: TTL per operation/collection. Defaults to CacheTtlPolicy().
        """
        self._fallback = fallback
        self._cache = cache
        self._ttl_policy = ttl_policy or CacheTtlPolicy()

    @property
    def fallback(self) -> BaseDocumentStore:
        return self._fallback

    @property
    def cache(self) -> BaseCacheStore:
        return self._cache

    @property
    def ttl_policy(self) -> CacheTtlPolicy:
        return self._ttl_policy

    # --- Lifecycle ---

    async def init(self, collection_names: Iterable[str | Enum]) -> None:
        await self._fallback.init(collection_names)

    async def reset_cache(self) -> None:
        """Drop every cache entry (between test scenarios or tenants)."""
        await self._cache.clear()

    async def close(self) -> None:
        await self._cache.close()
        await self._fallback.close()

    # --- Writes ---

    async def add_object(self, collection: str | Enum, doc: Mapping[str, Any]) -> Document:
        stored = await self._fallback.add_object(collection, ensure_obj_has_id(doc))
        await self._cache_set(
            self._point_key(collection, stored[ID_FIELD]), stored, "findOne", collection
        )
        return stored

    async def delete_object_by_id(self, collection: str | Enum, object_id: ObjectIdLike) -> None:
        object_id = ensure_object_id(object_id)
        key = self._point_key(collection, object_id)
        await self._cache_delete(key)
        await self._fallback.delete_object_by_id(collection, object_id)
        await self._cache_delete(key)

    async def update_object_by_id(
        self,
        collection: str | Enum,
        object_id: ObjectIdLike,
        new_values: Mapping[str, Any],
    ) -> None:
        object_id = ensure_object_id(object_id)
        key = self._point_key(collection, object_id)
        try:
            await self._fallback.update_object_by_id(collection, object_id, new_values)
        except Exception:
            await self._cache_delete(key)
            raise

        cached = await self._cache_get(key)
        if cached is None:
            return
        patch = {k: v for k, v in new_values.items() if k != ID_FIELD}
        updated = remove_undefined_values({**cached, **patch})
        updated[ID_FIELD] = object_id
        await self._cache_set(key, updated, "findOne", collection)

    async def delete_objects(self, collection: str | Enum, query: Query) -> int:
        # Matches come from the fallback: a cached findMultiple list may miss
        # documents added since it was stored.
        found = await self._fallback.find_objects(collection, query)
        await gather_all(
            "delete_objects",
            [self.delete_object_by_id(collection, doc[ID_FIELD]) for doc in found],
        )
        logger.debug("Deleted %d documents from %s", len(found), collection)
        return len(found)

    # --- Reads ---

    async def find_object_by_id(
        self, collection: str | Enum, object_id: ObjectIdLike
    ) -> Document | None:
        object_id = ensure_object_id(object_id)
        key = self._point_key(collection, object_id)
        cached = await self._cache_get(key)
        if cached is not None:
            return cached

        found = await self._fallback.find_object_by_id(collection, object_id)
        if found is not None:
            await self._cache_set(key, found, "findOne", collection)
        return found

    async def find_object(self, collection: str | Enum, query: Query) -> Document | None:
        key = self._query_key("findOne", collection, query)
        cached = await self._cache_get(key)
        if cached is not None and cached.get(ID_FIELD) is not None:
            current = await self._cache_get(self._point_key(collection, cached[ID_FIELD]))
            if current is not None:
                return current
            logger.debug("Query entry %s has no live document entry, falling through", key)

        found = await self._fallback.find_object(collection, query)
        if found is not None:
            await self._cache_set(key, found, "findOne", collection)
            await self._cache_set(
                self._point_key(collection, found[ID_FIELD]), found, "findOne", collection
            )
        return found

    async def find_objects(self, collection: str | Enum, query: Query) -> list[Document]:
        key = self._query_key("findMultiple", collection, query)
        cached_ids = await self._cache_get(key)
        if cached_ids is not None:
            docs = await asyncio.gather(
                *(self.find_object_by_id(collection, object_id) for object_id in cached_ids)
            )
            return [doc for doc in docs if doc is not None]

        found = await self._fallback.find_objects(collection, query)
        await self._cache_set(key, [doc[ID_FIELD] for doc in found], "findMultiple", collection)
        await asyncio.gather(
            *(
                self._cache_set(self._point_key(collection, doc[ID_FIELD]), doc, "findOne", collection)
                for doc in found
            )
        )
        return found

    async def count_objects(self, collection: str | Enum, query: Query) -> int:
        key = self._query_key("count", collection, query)
        cached = await self._cache_get(key)
        if cached is not None:
            return cached

        count = await self._fallback.count_objects(collection, query)
        await self._cache_set(key, count, "count", collection)
        return count

    # --- Cache access (failures degrade to a bypass) ---

    @staticmethod
    def _point_key(collection: str | Enum, object_id: ObjectId) -> str:
        return get_cache_key("findOne", collection, str(object_id))

    @staticmethod
    def _query_key(operation: CacheOperation, collection: str | Enum, query: Query) -> str | None:
        try:
            return get_cache_key(operation, collection, query)
        except EncodingError as e:
            logger.warning(
                "Cannot derive %s cache key for %s, bypassing cache: %s", operation, collection, e
            )
            return None

    async def _cache_get(self, key: str | None) -> Any | None:
        if key is None:
            return None
        try:
            value = await self._cache.get(key)
        except CacheStoreError as e:
            logger.warning("Cache read failed for %s, bypassing cache: %s", key, e)
            return None
        logger.debug("Cache %s: %s", "miss" if value is None else "hit", key)
        return value

    async def _cache_set(
        self, key: str | None, value: Any, operation: CacheOperation, collection: str | Enum
    ) -> None:
        if key is None:
            return
        try:
            await self._cache.set(key, value, ttl_s=self._ttl_policy.ttl_for(operation, collection))
        except (CacheStoreError, EncodingError) as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    async def _cache_delete(self, key: str) -> None:
        try:
            await self._cache.delete(key)
        except CacheStoreError as e:
            logger.warning("Cache invalidation failed for %s: %s", key, e)
