# tests/conftest.py
"""Shared test fixtures for all unit and integration tests.

Provides sample documents and ready-made in-process stores. No external
dependencies: MongoDB and Redis are only touched by integration tests.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from bson import ObjectId

from docstore.cache.memory_cache_store import MemoryCacheStore
from docstore.storage.key_value_storage import FileKeyValueStorage, MemoryKeyValueStorage
from docstore.storage.local_storage_store import LocalStorageDocumentStore
from docstore.storage.memory_store import InMemoryDocumentStore


# === FIXTURES: Sample data ===


@pytest.fixture
def user_id() -> ObjectId:
    return ObjectId("65a1f0c2e4b0a1b2c3d4e5f6")


@pytest.fixture
def sample_user(user_id: ObjectId) -> dict:
    """User document with nested values, a list and a datetime."""
    return {
        "_id": user_id,
        "name": "Ada",
        "age": 36,
        "active": True,
        "tags": ["admin", "ops"],
        "address": {"city": "London", "zip": "N1"},
        "created_at": datetime(2026, 2, 16, 9, 30, tzinfo=timezone.utc),
    }


@pytest.fixture
def sample_users() -> list[dict]:
    """Three users without identifiers."""
    return [
        {"name": "Ada", "age": 36, "team": "core"},
        {"name": "Grace", "age": 45, "team": "core"},
        {"name": "Linus", "age": 28, "team": "kernel"},
    ]


# === FIXTURES: Stores ===


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def local_storage_store() -> LocalStorageDocumentStore:
    return LocalStorageDocumentStore(storage=MemoryKeyValueStorage())


@pytest.fixture
def file_storage_store(tmp_path) -> LocalStorageDocumentStore:
    return LocalStorageDocumentStore(storage=FileKeyValueStorage(tmp_path / "kv"))


@pytest.fixture(params=["memory", "local_storage", "file_storage"])
def any_store(request, tmp_path):
    """Every in-process backend, for contract tests."""
    if request.param == "memory":
        return InMemoryDocumentStore()
    if request.param == "local_storage":
        return LocalStorageDocumentStore(storage=MemoryKeyValueStorage())
    return LocalStorageDocumentStore(storage=FileKeyValueStorage(tmp_path / "kv"))


@pytest.fixture
def cache_store() -> MemoryCacheStore:
    return MemoryCacheStore(max_entries=1000)
