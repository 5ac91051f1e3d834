# src/storage/key_value_storage.py
"""String key/value storages backing LocalStorageDocumentStore.

Modeled on the browser ``localStorage`` API: synchronous, string keys,
string values. Two implementations:

- MemoryKeyValueStorage: dict-backed, does not persist (tests).
- FileKeyValueStorage: one file per key under a root directory, written
  atomically (temp file + replace).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote, unquote

from docstore.core.errors import BackendUnavailableError

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class BaseKeyValueStorage(ABC):
    """Synchronous string-to-string storage."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key; no-op if absent."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List all stored keys."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""

    def __len__(self) -> int:
        return len(self.keys())


class MemoryKeyValueStorage(BaseKeyValueStorage):
    """Non-persistent storage kept in a dict."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items = {}


class FileKeyValueStorage(BaseKeyValueStorage):
    """File-per-key storage under ``root``.

    Keys are percent-encoded into file names so any key round-trips.
    File-system failures raise BackendUnavailableError.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackendUnavailableError(f"Cannot create storage root {self._root}: {e}") from e

    @property
    def root(self) -> Path:
        return self._root

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise BackendUnavailableError(f"Cannot read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise BackendUnavailableError(f"Cannot write {path}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise BackendUnavailableError(f"Cannot remove key {key!r}: {e}") from e

    def keys(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(unquote(path.name[: -len(_SUFFIX)]) for path in self._root.glob(f"*{_SUFFIX}"))

    def clear(self) -> None:
        for key in self.keys():
            self.remove_item(key)
        logger.debug("Cleared key/value storage at %s", self._root)

    def _path(self, key: str) -> Path:
        """Return file path for a storage key."""
        return self._root / f"{quote(key, safe='')}{_SUFFIX}"
