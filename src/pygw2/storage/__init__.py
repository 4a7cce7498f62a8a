"""Storage layer.

A single persisted document holds every cached floor, map, the events
list and the map index. This package owns how that document is read,
written and judged fresh.
"""

from pygw2.storage.backends import FileBackend, MemoryBackend, StorageBackend
from pygw2.storage.policy import is_fresh
from pygw2.storage.schema import (
    CacheDocument,
    Collection,
    EventsRecord,
    FloorRecord,
    MapRecord,
    MapsIndexRecord,
)
from pygw2.storage.store import PersistentStore

__all__ = [
    "CacheDocument",
    "Collection",
    "EventsRecord",
    "FileBackend",
    "FloorRecord",
    "MapRecord",
    "MapsIndexRecord",
    "MemoryBackend",
    "PersistentStore",
    "StorageBackend",
    "is_fresh",
]
