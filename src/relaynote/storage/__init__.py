"""Key-value persistence for settings and analytics blobs.

Public API::

    from relaynote.storage import build_store

    store = build_store(settings.storage)
    store.set("notification_settings", json.dumps(blob))
"""

from relaynote.storage.base import KeyValueStore, build_store
from relaynote.storage.file import JsonFileStore
from relaynote.storage.memory import MemoryStore

__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore", "build_store"]
