# src/cache/keys.py
"""Cache key derivation.

``<operation>.<collection>.<query>`` where ``query`` is the hex id for
by-id lookups, or the canonical JSON of the serialized query: object keys
sorted lexicographically at every nesting level, array order preserved, no
whitespace. Queries differing only in field order map to the same key.
"""

from __future__ import annotations

import json
from enum import Enum

from bson import ObjectId

from docstore.core.codec import serialize
from docstore.core.errors import EncodingError
from docstore.core.models import CacheOperation, Query, collection_name


def canonical_query(query: Query) -> str:
    """Deterministic string form of a query.

    Raises:
        EncodingError: If the query cannot be serialized.
    """
    wire_query = serialize(query, drop_undefined=False)
    try:
        return json.dumps(wire_query, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Query cannot be canonicalized: {e}") from e


def get_cache_key(
    operation: CacheOperation,
    collection: str | Enum,
    query: Query | ObjectId | str,
) -> str:
    """Build the cache key for an operation on a collection.

    ``query`` is an identifier (ObjectId or its hex string) for by-id
    lookups, otherwise a query mapping.
    """
    if isinstance(query, (ObjectId, str)):
        query_repr = str(query)
    else:
        query_repr = canonical_query(query)
    return f"{operation}.{collection_name(collection)}.{query_repr}"
