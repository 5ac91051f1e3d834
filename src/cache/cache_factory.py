# src/cache/cache_factory.py
"""Factory for cache store instantiation."""

from __future__ import annotations

from docstore.cache.base_cache_store import BaseCacheStore
from docstore.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from docstore.cache.memory_cache_store import MemoryCacheStore
        max_entries = 10_000 if settings is None else settings.cache_max_entries
        return MemoryCacheStore(max_entries=max_entries)

    if backend == "redis":
        from docstore.cache.redis_store import RedisCacheStore
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(
            redis_url=settings.cache_redis_url,
            key_prefix=settings.cache_key_prefix,
        )

    raise ValueError(f"Unsupported cache backend: {backend!r}")
