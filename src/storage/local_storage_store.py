# src/storage/local_storage_store.py
"""Document store persisted in a localStorage-style key/value storage.

Layout inside the storage:

- ``<namespace>.<collection>``: JSON array of the document keys (hex ids),
  in insertion order.
- ``<namespace>.<collection>.<hex id>``: the serialized document as JSON.
"""

from __future__ import annotations

import json
import logging

from docstore.core.errors import EncodingError
from docstore.core.models import Document
from docstore.storage.key_value_storage import BaseKeyValueStorage, MemoryKeyValueStorage
from docstore.storage.serialized_store import SerializedDocumentStore

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "localstoragedb"


class LocalStorageDocumentStore(SerializedDocumentStore):
    """Document store over a BaseKeyValueStorage (defaults to memory)."""

    def __init__(
        self,
        storage: BaseKeyValueStorage | None = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._storage = storage if storage is not None else MemoryKeyValueStorage()
        self._namespace = namespace

    @property
    def storage(self) -> BaseKeyValueStorage:
        return self._storage

    async def _ensure_collection(self, name: str) -> None:
        if self._storage.get_item(self._index_key(name)) is None:
            self._write_index(name, [])
            logger.debug("Created collection %s in namespace %s", name, self._namespace)

    async def _load_all(self, name: str) -> list[Document]:
        docs: list[Document] = []
        for key in self._read_index(name):
            doc = await self._load_one(name, key)
            if doc is None:
                logger.warning("Index of %s lists missing document %s", name, key)
                continue
            docs.append(doc)
        return docs

    async def _load_one(self, name: str, key: str) -> Document | None:
        raw = self._storage.get_item(self._doc_key(name, key))
        if raw is None:
            return None
        return self._decode(raw, self._doc_key(name, key))

    async def _store(self, name: str, key: str, wire_doc: Document) -> None:
        self._storage.set_item(self._doc_key(name, key), json.dumps(wire_doc))
        index = self._read_index(name)
        if key not in index:
            index.append(key)
            self._write_index(name, index)

    async def _remove(self, name: str, key: str) -> None:
        self._storage.remove_item(self._doc_key(name, key))
        index = self._read_index(name)
        if key in index:
            index.remove(key)
            self._write_index(name, index)

    # --- Helpers ---

    def _index_key(self, name: str) -> str:
        return f"{self._namespace}.{name}"

    def _doc_key(self, name: str, key: str) -> str:
        return f"{self._namespace}.{name}.{key}"

    def _read_index(self, name: str) -> list[str]:
        raw = self._storage.get_item(self._index_key(name))
        if raw is None:
            return []
        return list(self._decode(raw, self._index_key(name)))

    def _write_index(self, name: str, index: list[str]) -> None:
        self._storage.set_item(self._index_key(name), json.dumps(index))

    @staticmethod
    def _decode(raw: str, storage_key: str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise EncodingError(f"Corrupt JSON stored under {storage_key!r}") from e
