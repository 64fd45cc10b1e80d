"""Abstract key-value store and the config-driven factory."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relaynote.config.settings import StorageSettings


class KeyValueStore(abc.ABC):
    """String-to-string store holding serialized JSON blobs."""

    @abc.abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value or ``None``."""

    @abc.abstractmethod
    def set(self, key: str, value: str) -> None:
        """Overwrite *key* with *value*."""

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key* if present."""


def build_store(settings: StorageSettings) -> KeyValueStore:
    """Instantiate the store selected by ``storage.backend``."""
    if settings.backend == "file":
        from relaynote.storage.file import JsonFileStore

        if not settings.path:
            msg = "storage.path is required when storage.backend is 'file'"
            raise ValueError(msg)
        return JsonFileStore(settings.path)
    if settings.backend == "memory":
        from relaynote.storage.memory import MemoryStore

        return MemoryStore()
    msg = f"Unknown storage backend '{settings.backend}'"
    raise ValueError(msg)
