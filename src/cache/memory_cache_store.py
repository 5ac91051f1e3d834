# src/cache/memory_cache_store.py
"""Process-local cache store on ``cachetools.TLRUCache``.

Each entry carries its own TTL; expiry is checked on access and expired
entries are pruned on writes. Values are deep-copied on the way in and out
so callers never share mutable state with the cache.
"""

from __future__ import annotations

import copy
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cachetools import TLRUCache

from docstore.cache.base_cache_store import BaseCacheStore


@dataclass(frozen=True, slots=True)
class _Slot:
    value: Any
    ttl_s: float


def _time_to_use(_key: str, slot: _Slot, now: float) -> float:
    return now + slot.ttl_s


class MemoryCacheStore(BaseCacheStore):
    """Bounded in-memory cache with per-entry expiry."""

    def __init__(
        self,
        max_entries: int = 10_000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: TLRUCache = TLRUCache(maxsize=max_entries, ttu=_time_to_use, timer=timer)

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Any | None:
        slot = self._entries.get(key)
        if slot is None:
            return None
        return copy.deepcopy(slot.value)

    async def set(self, key: str, value: Any, *, ttl_s: float) -> None:
        if ttl_s <= 0:
            # TLRUCache skips already-expired items without dropping the old one
            self._entries.pop(key, None)
            return
        self._entries[key] = _Slot(value=copy.deepcopy(value), ttl_s=ttl_s)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self) -> None:
        self._entries.clear()
