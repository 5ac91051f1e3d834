# src/__init__.py
"""docstore: async document store with MongoDB, in-memory and local-storage
backends, and a caching decorator in front of any of them."""

from __future__ import annotations

from docstore.cache.cached_store import CachedDocumentStore
from docstore.cache.memory_cache_store import MemoryCacheStore
from docstore.cache.models import CacheTtlPolicy
from docstore.config.settings import ConfigurationError, Settings, load_settings
from docstore.core.codec import (
    UNDEFINED,
    deserialize,
    ensure_obj_has_id,
    ensure_object_id,
    remove_undefined_values,
    serialize,
)
from docstore.core.errors import (
    BackendUnavailableError,
    BulkOperationError,
    CacheStoreError,
    DocStoreError,
    DuplicateIdentifierError,
    EncodingError,
    NotFoundError,
    UnsupportedQueryError,
)
from docstore.logging.logger import setup_logging_from_settings
from docstore.storage.base_document_store import BaseDocumentStore
from docstore.storage.local_storage_store import LocalStorageDocumentStore
from docstore.storage.memory_store import InMemoryDocumentStore
from docstore.storage.store_factory import create_document_store

__all__ = [
    "UNDEFINED",
    "BackendUnavailableError",
    "BaseDocumentStore",
    "BulkOperationError",
    "CacheStoreError",
    "CacheTtlPolicy",
    "CachedDocumentStore",
    "ConfigurationError",
    "DocStoreError",
    "DuplicateIdentifierError",
    "EncodingError",
    "InMemoryDocumentStore",
    "LocalStorageDocumentStore",
    "MemoryCacheStore",
    "NotFoundError",
    "Settings",
    "UnsupportedQueryError",
    "create_document_store",
    "deserialize",
    "ensure_obj_has_id",
    "ensure_object_id",
    "load_settings",
    "remove_undefined_values",
    "serialize",
    "setup_logging_from_settings",
]
