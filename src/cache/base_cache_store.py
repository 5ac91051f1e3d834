# src/cache/base_cache_store.py
"""Abstract cache store interface.

A mapping from string key to an arbitrary value (document, list of ids or
count) with a per-entry TTL. Expired entries are never returned.
Implementations raise CacheStoreError for storage failures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve a live entry by key (None on miss or expiry)."""

    @abstractmethod
    async def set(self, key: str, value: Any, *, ttl_s: float) -> None:
        """Store an entry that expires after ``ttl_s`` seconds."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove an entry (no-op if absent)."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry owned by this store."""

    async def close(self) -> None:
        """Release connections. Default: nothing to release."""
