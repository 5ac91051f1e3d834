# src/storage/mongo_store.py
"""MongoDB document store.

Uses the pymongo async API (``pymongo.AsyncMongoClient``). MongoDB stores
ObjectIds natively, so documents and queries are passed through without the
wire codec; only identifiers supplied as strings are normalized.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from enum import Enum
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.errors import CollectionInvalid, ConnectionFailure, DuplicateKeyError

from docstore.core.codec import (
    UNDEFINED,
    ensure_obj_has_id,
    ensure_object_id,
    remove_undefined_values,
    undefined_to_none,
)
from docstore.core.errors import BackendUnavailableError, DuplicateIdentifierError, NotFoundError
from docstore.core.models import ID_FIELD, Document, ObjectIdLike, Query, collection_name
from docstore.storage.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)


@contextmanager
def _connection_errors(action: str) -> Iterator[None]:
    """Translate driver connection failures into BackendUnavailableError."""
    try:
        yield
    except ConnectionFailure as e:
        raise BackendUnavailableError(f"MongoDB unavailable during {action}: {e}") from e


class MongoDocumentStore(BaseDocumentStore):
    """Document store backed by a MongoDB database."""

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        database: str = "docstore",
        client: Any | None = None,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        """Initialize the store; no connection is made until the first operation.

        Args:
            url: MongoDB connection string (ignored when ``client`` is given).
            database: Database holding the collections.
            client: Pre-built AsyncMongoClient (or compatible) to reuse.
            server_selection_timeout_ms: Driver server selection timeout.
        """
        if client is None:
            client = AsyncMongoClient(url, serverSelectionTimeoutMS=server_selection_timeout_ms)
        self._client = client
        self._db = client[database]
        self._database = database

    def _collection(self, collection: str | Enum):
        return self._db[collection_name(collection)]

    async def init(self, collection_names: Iterable[str | Enum]) -> None:
        names = [collection_name(c) for c in collection_names]
        with _connection_errors("init"):
            existing = set(await self._db.list_collection_names())
            for name in names:
                if name in existing:
                    continue
                try:
                    await self._db.create_collection(name)
                except CollectionInvalid:
                    logger.debug("Collection %s created concurrently", name)
        logger.info("MongoDB database %s initialized collections: %s", self._database, ", ".join(names))

    async def add_object(self, collection: str | Enum, doc: Mapping[str, Any]) -> Document:
        prepared = remove_undefined_values(ensure_obj_has_id(doc))
        with _connection_errors("add_object"):
            try:
                await self._collection(collection).insert_one(prepared)
            except DuplicateKeyError as e:
                raise DuplicateIdentifierError(collection_name(collection), prepared[ID_FIELD]) from e
        return prepared

    async def delete_object_by_id(self, collection: str | Enum, object_id: ObjectIdLike) -> None:
        with _connection_errors("delete_object_by_id"):
            await self._collection(collection).delete_one({ID_FIELD: ensure_object_id(object_id)})

    async def update_object_by_id(
        self,
        collection: str | Enum,
        object_id: ObjectIdLike,
        new_values: Mapping[str, Any],
    ) -> None:
        object_id = ensure_object_id(object_id)
        patch = {k: v for k, v in new_values.items() if k != ID_FIELD}
        update: dict[str, Any] = {}
        set_fields = remove_undefined_values({k: v for k, v in patch.items() if v is not UNDEFINED})
        unset_fields = {k: "" for k, v in patch.items() if v is UNDEFINED}
        if set_fields:
            update["$set"] = set_fields
        if unset_fields:
            update["$unset"] = unset_fields

        coll = self._collection(collection)
        with _connection_errors("update_object_by_id"):
            if update:
                matched = (await coll.update_one({ID_FIELD: object_id}, update)).matched_count
            else:
                matched = await coll.count_documents({ID_FIELD: object_id}, limit=1)
        if not matched:
            raise NotFoundError(collection_name(collection), object_id)

    async def find_object_by_id(
        self, collection: str | Enum, object_id: ObjectIdLike
    ) -> Document | None:
        with _connection_errors("find_object_by_id"):
            return await self._collection(collection).find_one({ID_FIELD: ensure_object_id(object_id)})

    async def find_object(self, collection: str | Enum, query: Query) -> Document | None:
        with _connection_errors("find_object"):
            return await self._collection(collection).find_one(undefined_to_none(query))

    async def find_objects(self, collection: str | Enum, query: Query) -> list[Document]:
        with _connection_errors("find_objects"):
            return await self._collection(collection).find(undefined_to_none(query)).to_list()

    async def count_objects(self, collection: str | Enum, query: Query) -> int:
        with _connection_errors("count_objects"):
            return await self._collection(collection).count_documents(undefined_to_none(query))

    async def close(self) -> None:
        await self._client.close()
