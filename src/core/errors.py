# src/core/errors.py
"""Error taxonomy shared by the storage contract, backends and cache layer.

Backends translate driver failures into these types and chain the original
exception. Only cache-layer errors (CacheStoreError, and EncodingError raised
while deriving a cache key) are absorbed by the caching decorator.
"""

from __future__ import annotations


class DocStoreError(Exception):
    """Base class for every error raised by docstore."""


class NotFoundError(DocStoreError):
    """Raised when an update targets an identifier with no document."""

    def __init__(self, collection: str, object_id: object) -> None:
        super().__init__(
            f"Document with id {object_id} not found in collection {collection}"
        )
        self.collection = collection
        self.object_id = object_id


class DuplicateIdentifierError(DocStoreError):
    """Raised when an insert collides with an existing identifier."""

    def __init__(self, collection: str, object_id: object) -> None:
        super().__init__(
            f"Document with id {object_id} already exists in collection {collection}"
        )
        self.collection = collection
        self.object_id = object_id


class BackendUnavailableError(DocStoreError):
    """Raised when the backing store cannot be reached or initialized."""


class EncodingError(DocStoreError, ValueError):
    """Raised when a value cannot be converted by the identifier codec."""


class UnsupportedQueryError(DocStoreError, ValueError):
    """Raised by the in-process matcher for operators it does not implement."""


class CacheStoreError(DocStoreError):
    """Raised by cache stores; the caching decorator degrades to a bypass."""


class BulkOperationError(DocStoreError):
    """Raised when one or more sub-operations of a bulk operation fail.

    Sub-operations that succeeded are not rolled back. ``errors`` holds every
    failure in input order; the exception is chained from the first one.
    """

    def __init__(self, operation: str, errors: list[BaseException], total: int) -> None:
        super().__init__(
            f"{operation}: {len(errors)} of {total} sub-operations failed "
            f"(first: {errors[0]!r})"
        )
        self.operation = operation
        self.errors = errors
        self.total = total
