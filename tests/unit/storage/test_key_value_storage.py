# tests/unit/storage/test_key_value_storage.py
"""Tests for storage/key_value_storage.py."""

from __future__ import annotations

import pytest

from docstore.core.errors import BackendUnavailableError
from docstore.storage.key_value_storage import FileKeyValueStorage, MemoryKeyValueStorage


@pytest.fixture(params=["memory", "file"])
def storage(request, tmp_path):
    if request.param == "memory":
        return MemoryKeyValueStorage()
    return FileKeyValueStorage(tmp_path / "kv")


class TestKeyValueStorage:
    def test_get_missing(self, storage):
        assert storage.get_item("nope") is None

    def test_set_get_replace(self, storage):
        storage.set_item("a.b", "1")
        storage.set_item("a.b", "2")
        assert storage.get_item("a.b") == "2"
        assert len(storage) == 1

    def test_remove(self, storage):
        storage.set_item("k", "v")
        storage.remove_item("k")
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_keys_and_clear(self, storage):
        storage.set_item("ns.users", "[]")
        storage.set_item("ns/odd key", "x")
        assert sorted(storage.keys()) == ["ns.users", "ns/odd key"]
        storage.clear()
        assert storage.keys() == []


class TestFileKeyValueStorage:
    def test_persists_across_instances(self, tmp_path):
        FileKeyValueStorage(tmp_path).set_item("k", "v")
        assert FileKeyValueStorage(tmp_path).get_item("k") == "v"

    def test_no_temp_files_left(self, tmp_path):
        storage = FileKeyValueStorage(tmp_path)
        storage.set_item("k", "v")
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_unusable_root(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(BackendUnavailableError):
            FileKeyValueStorage(blocker / "sub")
