# src/storage/memory_store.py
"""Process-local document store.

Documents live in plain dicts, held in serialized form so stored values
never alias caller objects. Nothing is persisted.
"""

from __future__ import annotations

from docstore.core.models import Document
from docstore.storage.serialized_store import SerializedDocumentStore


class InMemoryDocumentStore(SerializedDocumentStore):
    """Document store kept in process memory (tests, ephemeral use)."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}

    @property
    def collection_names(self) -> list[str]:
        return list(self._collections)

    async def _ensure_collection(self, name: str) -> None:
        self._collections.setdefault(name, {})

    async def _load_all(self, name: str) -> list[Document]:
        return list(self._collections.get(name, {}).values())

    async def _load_one(self, name: str, key: str) -> Document | None:
        return self._collections.get(name, {}).get(key)

    async def _store(self, name: str, key: str, wire_doc: Document) -> None:
        self._collections.setdefault(name, {})[key] = wire_doc

    async def _remove(self, name: str, key: str) -> None:
        self._collections.get(name, {}).pop(key, None)
