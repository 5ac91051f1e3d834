# src/core/models.py
"""Shared document types used across the storage and cache modules.

No module redefines these aliases; all imports come from core.models.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Mapping

from bson import ObjectId

ID_FIELD = "_id"

Document = dict[str, Any]
Query = Mapping[str, Any]
ObjectIdLike = ObjectId | str

CacheOperation = Literal["findOne", "findMultiple", "count"]


def collection_name(collection: str | Enum) -> str:
    """Normalize a declared collection (enum member or plain string) to its name."""
    if isinstance(collection, Enum):
        return str(collection.value)
    return str(collection)
