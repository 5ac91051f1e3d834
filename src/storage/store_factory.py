# src/storage/store_factory.py
"""Factory: instantiate the document store from configuration."""

from __future__ import annotations

import logging

from docstore.cache.base_cache_store import BaseCacheStore
from docstore.config.settings import Settings
from docstore.storage.base_document_store import BaseDocumentStore
from docstore.storage.memory_store import InMemoryDocumentStore

logger = logging.getLogger(__name__)


def create_backend_store(settings: Settings) -> BaseDocumentStore:
    """Create the configured backend store, without caching.

    Raises:
        ValueError: If the backend is not supported or misconfigured.
    """
    if settings.store_backend == "memory":
        return InMemoryDocumentStore()

    if settings.store_backend == "local_storage":
        from docstore.storage.key_value_storage import (
            FileKeyValueStorage,
            MemoryKeyValueStorage,
        )
        from docstore.storage.local_storage_store import LocalStorageDocumentStore
        storage = (
            FileKeyValueStorage(settings.local_storage_root)
            if settings.local_storage_root is not None
            else MemoryKeyValueStorage()
        )
        return LocalStorageDocumentStore(
            storage=storage, namespace=settings.local_storage_namespace
        )

    if settings.store_backend == "mongodb":
        from docstore.storage.mongo_store import MongoDocumentStore
        if not settings.mongodb_url:
            raise ValueError("MONGODB_URL must be set when STORE_BACKEND=mongodb")
        return MongoDocumentStore(
            url=settings.mongodb_url,
            database=settings.mongodb_database,
            server_selection_timeout_ms=settings.mongodb_server_selection_timeout_ms,
        )

    raise ValueError(f"Unsupported store backend: {settings.store_backend!r}")


def create_document_store(
    settings: Settings,
    cache_store: BaseCacheStore | None = None,
) -> BaseDocumentStore:
    """Create the document store, wrapped in the caching decorator when enabled.

    Args:
        settings: Application settings (STORE_BACKEND, CACHE_* env vars).
        cache_store: Cache store to share between decorators. Built from
            settings when omitted.

    Returns:
        BaseDocumentStore instance.
    """
    backend = create_backend_store(settings)
    if not settings.cache_enabled:
        logger.info("Document store %s created without cache", settings.store_backend)
        return backend

    from docstore.cache.cache_factory import create_cache_store
    from docstore.cache.cached_store import CachedDocumentStore

    cache = cache_store if cache_store is not None else create_cache_store(settings)
    logger.info(
        "Document store %s created with %s cache",
        settings.store_backend,
        type(cache).__name__,
    )
    return CachedDocumentStore(backend, cache, settings.cache_ttl_policy())
