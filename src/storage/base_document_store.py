# src/storage/base_document_store.py
"""Abstract document store contract.

Backends implement the primitive operations; the composite operations
(upsert, find-and-update, find-and-delete, bulk delete, bulk insert) are
built here from the primitives only, so every backend and the caching
decorator get them for free.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Iterable, Mapping, Sequence
from enum import Enum
from typing import Any, TypeVar

from docstore.core.codec import ensure_object_id, remove_undefined_values
from docstore.core.errors import BulkOperationError
from docstore.core.models import ID_FIELD, Document, ObjectIdLike, Query

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseDocumentStore(ABC):
    """Unified interface for document storage backends.

    Collections are identified by name (a ``str`` or a ``str``-valued enum
    member). ``init`` must complete before any other operation.
    """

    # --- Primitives ---

    @abstractmethod
    async def init(self, collection_names: Iterable[str | Enum]) -> None:
        """Prepare the named collections. Idempotent."""

    @abstractmethod
    async def add_object(self, collection: str | Enum, doc: Mapping[str, Any]) -> Document:
        """Insert a document, generating ``_id`` if absent; return the stored document.

        Raises:
            DuplicateIdentifierError: If a document with that ``_id`` exists.
        """

    @abstractmethod
    async def delete_object_by_id(self, collection: str | Enum, object_id: ObjectIdLike) -> None:
        """Remove the document with that identifier (no-op if absent)."""

    @abstractmethod
    async def update_object_by_id(
        self,
        collection: str | Enum,
        object_id: ObjectIdLike,
        new_values: Mapping[str, Any],
    ) -> None:
        """Shallow-merge ``new_values`` into the stored document.

        Raises:
            NotFoundError: If no document has that identifier.
        """

    @abstractmethod
    async def find_object_by_id(
        self, collection: str | Enum, object_id: ObjectIdLike
    ) -> Document | None:
        """Return the document with that identifier, or None."""

    @abstractmethod
    async def find_object(self, collection: str | Enum, query: Query) -> Document | None:
        """Return the first document matching ``query``, or None."""

    @abstractmethod
    async def find_objects(self, collection: str | Enum, query: Query) -> list[Document]:
        """Return every document matching ``query`` (empty list if none)."""

    @abstractmethod
    async def count_objects(self, collection: str | Enum, query: Query) -> int:
        """Return the number of documents matching ``query``."""

    async def close(self) -> None:
        """Release backend resources. Default: nothing to release."""

    # --- Composite operations ---

    async def add_or_update_object(
        self, collection: str | Enum, doc: Mapping[str, Any]
    ) -> Document:
        """Update the document if its ``_id`` exists, otherwise insert it.

        Returns the stored view: the existing fields overlaid by ``doc`` when
        updating, or the inserted document.
        """
        if not doc.get(ID_FIELD):
            return await self.add_object(collection, doc)

        object_id = ensure_object_id(doc[ID_FIELD])
        existing = await self.find_object_by_id(collection, object_id)
        if existing is None:
            return await self.add_object(collection, doc)

        new_values = {k: v for k, v in doc.items() if k != ID_FIELD}
        await self.update_object_by_id(collection, object_id, new_values)
        return _merged(existing, new_values, object_id)

    async def find_object_and_update(
        self,
        collection: str | Enum,
        object_id: ObjectIdLike,
        new_values: Mapping[str, Any],
    ) -> Document | None:
        """Apply an update by id and return the merged view, or None if absent.

        The view is built from the pre-update read and ``new_values``; the
        document is not re-read after the write.
        """
        object_id = ensure_object_id(object_id)
        existing = await self.find_object_by_id(collection, object_id)
        if existing is None:
            return None
        await self.update_object_by_id(collection, object_id, new_values)
        return _merged(existing, new_values, object_id)

    async def delete_objects(self, collection: str | Enum, query: Query) -> int:
        """Delete every document matching ``query``; return how many were matched.

        Deletes run concurrently. Documents added while this runs may or may
        not be included.
        """
        found = await self.find_objects(collection, query)
        await gather_all(
            "delete_objects",
            [self.delete_object_by_id(collection, doc[ID_FIELD]) for doc in found],
        )
        logger.debug("Deleted %d documents from %s", len(found), collection)
        return len(found)

    async def find_object_and_delete(
        self, collection: str | Enum, query: Query
    ) -> Document | None:
        """Delete and return the first document matching ``query``, or None."""
        found = await self.find_object(collection, query)
        if found is None:
            return None
        await self.delete_object_by_id(collection, found[ID_FIELD])
        return found

    async def add_multiple_objects(
        self, collection: str | Enum, docs: Sequence[Mapping[str, Any]]
    ) -> list[Document]:
        """Insert documents concurrently; results keep the input order."""
        return await gather_all(
            "add_multiple_objects",
            [self.add_object(collection, doc) for doc in docs],
        )


def _merged(existing: Mapping[str, Any], new_values: Mapping[str, Any], object_id: Any) -> Document:
    merged = remove_undefined_values({**existing, **new_values})
    merged[ID_FIELD] = object_id
    return merged


async def gather_all(operation: str, awaitables: list[Awaitable[T]]) -> list[T]:
    """Run every awaitable to completion; raise BulkOperationError if any failed."""
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    errors = [r for r in results if isinstance(r, BaseException)]
    if errors:
        raise BulkOperationError(operation, errors, len(results)) from errors[0]
    return results  # type: ignore[return-value]
