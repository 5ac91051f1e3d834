# src/storage/serialized_store.py
"""Shared implementation for backends that keep documents in JSON wire form.

Subclasses provide five storage hooks keyed by collection name and the hex
string of the document id; every primitive of the contract is implemented
here on top of them, with the codec applied right before each write and
right after each read, and queries matched by ``core.query``.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from docstore.core.codec import (
    deserialize,
    encode_object_id,
    ensure_obj_has_id,
    ensure_object_id,
    is_encoded_object_id,
    serialize,
)
from docstore.core.errors import DuplicateIdentifierError, NotFoundError
from docstore.core.models import ID_FIELD, Document, ObjectIdLike, Query, collection_name
from docstore.core.query import matches
from docstore.storage.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)


class SerializedDocumentStore(BaseDocumentStore):
    """Document store over serialized documents; subclasses supply the storage."""

    # --- Storage hooks ---

    @abstractmethod
    async def _ensure_collection(self, name: str) -> None:
        """Create the collection if it does not exist."""

    @abstractmethod
    async def _load_all(self, name: str) -> list[Document]:
        """Return every wire-form document of the collection in insertion order."""

    @abstractmethod
    async def _load_one(self, name: str, key: str) -> Document | None:
        """Return one wire-form document, or None."""

    @abstractmethod
    async def _store(self, name: str, key: str, wire_doc: Document) -> None:
        """Insert or replace one wire-form document."""

    @abstractmethod
    async def _remove(self, name: str, key: str) -> None:
        """Remove one document; no-op if absent."""

    # --- Contract ---

    async def init(self, collection_names: Iterable[str | Enum]) -> None:
        names = [collection_name(c) for c in collection_names]
        for name in names:
            await self._ensure_collection(name)
        logger.info("%s initialized collections: %s", type(self).__name__, ", ".join(names))

    async def add_object(self, collection: str | Enum, doc: Mapping[str, Any]) -> Document:
        name = collection_name(collection)
        prepared = ensure_obj_has_id(doc)
        key = str(prepared[ID_FIELD])
        await self._ensure_collection(name)
        if await self._load_one(name, key) is not None:
            raise DuplicateIdentifierError(name, prepared[ID_FIELD])
        wire_doc = serialize(prepared)
        await self._store(name, key, wire_doc)
        return deserialize(wire_doc)

    async def delete_object_by_id(self, collection: str | Enum, object_id: ObjectIdLike) -> None:
        await self._remove(collection_name(collection), str(ensure_object_id(object_id)))

    async def update_object_by_id(
        self,
        collection: str | Enum,
        object_id: ObjectIdLike,
        new_values: Mapping[str, Any],
    ) -> None:
        name = collection_name(collection)
        object_id = ensure_object_id(object_id)
        key = str(object_id)
        existing = await self._load_one(name, key)
        if existing is None:
            raise NotFoundError(name, object_id)

        patch = {k: v for k, v in new_values.items() if k != ID_FIELD}
        wire_doc = serialize({**existing, **patch})
        wire_doc[ID_FIELD] = encode_object_id(object_id)
        await self._store(name, key, wire_doc)

    async def find_object_by_id(
        self, collection: str | Enum, object_id: ObjectIdLike
    ) -> Document | None:
        wire_doc = await self._load_one(
            collection_name(collection), str(ensure_object_id(object_id))
        )
        return None if wire_doc is None else deserialize(wire_doc)

    async def find_object(self, collection: str | Enum, query: Query) -> Document | None:
        name = collection_name(collection)
        wire_query = serialize(query, drop_undefined=False)
        key = _id_only_key(wire_query)
        if key is not None:
            wire_doc = await self._load_one(name, key)
            return None if wire_doc is None else deserialize(wire_doc)

        for wire_doc in await self._load_all(name):
            if matches(wire_doc, wire_query):
                return deserialize(wire_doc)
        return None

    async def find_objects(self, collection: str | Enum, query: Query) -> list[Document]:
        wire_query = serialize(query, drop_undefined=False)
        return [
            deserialize(wire_doc)
            for wire_doc in await self._load_all(collection_name(collection))
            if matches(wire_doc, wire_query)
        ]

    async def count_objects(self, collection: str | Enum, query: Query) -> int:
        wire_query = serialize(query, drop_undefined=False)
        return sum(
            1
            for wire_doc in await self._load_all(collection_name(collection))
            if matches(wire_doc, wire_query)
        )


def _id_only_key(wire_query: Mapping[str, Any]) -> str | None:
    """Storage key when the query is exactly ``{"_id": <id>}``."""
    if len(wire_query) != 1:
        return None
    value = wire_query.get(ID_FIELD)
    return value[len("oid:"):] if is_encoded_object_id(value) else None
