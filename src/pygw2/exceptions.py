"""Custom exception hierarchy for pygw2."""

from __future__ import annotations


class Gw2Error(Exception):
    """Base exception for all pygw2 errors."""


class Gw2ConfigError(Gw2Error):
    """Invalid or missing configuration."""


class RemoteFetchError(Gw2Error):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON).

    Never retried automatically. A cached value is not used as a fallback
    when this is raised.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class StorageError(Gw2Error):
    """The storage backend failed to read or write a document."""


class StorageFull(StorageError):
    """The storage backend rejected a write (quota exceeded or disk full).

    The in-memory cache is still valid for the rest of the session; only
    durability of the write is lost.
    """


class StorageCorrupt(StorageError):
    """The persisted cache document could not be decoded.

    Raised while loading and recovered from by resetting to an empty cache.
    """
