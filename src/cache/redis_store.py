# src/cache/redis_store.py
"""Redis-based cache store (CACHE_BACKEND=redis).

Suitable for multi-process deployments sharing one cache. Values are stored
as JSON of the codec's wire form, so ObjectIds survive the trip; expiry is
delegated to Redis (millisecond PX).
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from docstore.cache.base_cache_store import BaseCacheStore
from docstore.core.codec import deserialize, serialize
from docstore.core.errors import CacheStoreError, EncodingError

logger = logging.getLogger(__name__)

_KEY_PREFIX = "docstore:cache:"
_DELETE_BATCH = 500


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store."""

    def __init__(
        self,
        redis_url: str = "",
        client: Any | None = None,
        key_prefix: str = _KEY_PREFIX,
    ) -> None:
        if client is None:
            if not redis_url:
                raise ValueError("redis_url is required when no client is given")
            client = aioredis.Redis.from_url(redis_url, decode_responses=True)
        self._client = client
        self._prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any | None:
        """Retrieve cache entry by key."""
        try:
            blob = await self._client.get(self._key(key))
        except RedisError as e:
            raise CacheStoreError(f"Redis get failed for {key}: {e}") from e
        if blob is None:
            return None
        try:
            return deserialize(json.loads(blob))
        except (json.JSONDecodeError, EncodingError) as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    async def set(self, key: str, value: Any, *, ttl_s: float) -> None:
        """Store a cache entry with a TTL."""
        if ttl_s <= 0:
            await self.delete(key)
            return
        payload = json.dumps(serialize(value), separators=(",", ":"))
        try:
            await self._client.set(self._key(key), payload, px=max(1, int(ttl_s * 1000)))
        except RedisError as e:
            raise CacheStoreError(f"Redis set failed for {key}: {e}") from e

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        try:
            await self._client.delete(self._key(key))
        except RedisError as e:
            raise CacheStoreError(f"Redis delete failed for {key}: {e}") from e

    async def clear(self) -> None:
        """Remove every key under this store's prefix."""
        try:
            batch: list[str] = []
            async for redis_key in self._client.scan_iter(match=f"{self._prefix}*"):
                batch.append(redis_key)
                if len(batch) >= _DELETE_BATCH:
                    await self._client.delete(*batch)
                    batch = []
            if batch:
                await self._client.delete(*batch)
        except RedisError as e:
            raise CacheStoreError(f"Redis clear failed: {e}") from e

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()
