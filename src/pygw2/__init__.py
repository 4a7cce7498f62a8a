"""pygw2 - Async Guild Wars 2 API client with a persistent TTL cache."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pygw2")
except PackageNotFoundError:
    __version__ = "0+local"
from pygw2.client import Gw2Client
from pygw2.config import Gw2Config
from pygw2.exceptions import (
    Gw2ConfigError,
    Gw2Error,
    RemoteFetchError,
    StorageCorrupt,
    StorageError,
    StorageFull,
)
from pygw2.storage import (
    Collection,
    FileBackend,
    MemoryBackend,
    PersistentStore,
    is_fresh,
)

__all__ = [
    "__version__",
    "Collection",
    "FileBackend",
    "Gw2Client",
    "Gw2Config",
    "Gw2ConfigError",
    "Gw2Error",
    "MemoryBackend",
    "PersistentStore",
    "RemoteFetchError",
    "StorageCorrupt",
    "StorageError",
    "StorageFull",
    "is_fresh",
]
