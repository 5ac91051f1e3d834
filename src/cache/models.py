# src/cache/models.py
"""Cache policy models: per-operation and per-collection TTLs."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from docstore.core.models import CacheOperation, collection_name


class CacheTtlPolicy(BaseModel):
    """Effective TTL for a cache entry, by operation and collection.

    Precedence: collection override, then operation override, then
    ``default_ttl_s``.
    """

    default_ttl_s: float = Field(default=300.0, gt=0)
    operation_ttl_s: dict[CacheOperation, float] = Field(default_factory=dict)
    collection_ttl_s: dict[str, float] = Field(default_factory=dict)

    def ttl_for(self, operation: CacheOperation, collection: str | Enum) -> float:
        name = collection_name(collection)
        if name in self.collection_ttl_s:
            return self.collection_ttl_s[name]
        if operation in self.operation_ttl_s:
            return self.operation_ttl_s[operation]
        return self.default_ttl_s
