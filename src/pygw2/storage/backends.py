"""Byte-level key-value backends for the persisted cache document.

Backends are synchronous and enforce a total size quota across every key
they hold, the same way browser local storage does.
"""

from __future__ import annotations

import errno
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pygw2._constants import DEFAULT_STORAGE_QUOTA
from pygw2.exceptions import StorageError, StorageFull

_logger = logging.getLogger(__name__)

_DISK_FULL_ERRNOS = frozenset({errno.ENOSPC, errno.EDQUOT})


class StorageBackend(Protocol):
    """Structural interface the persistent store writes through."""

    def read(self, key: str) -> bytes | None:
        ...

    def write(self, key: str, value: bytes) -> None:
        ...


def _check_quota(key: str, needed: int, used_by_others: int, quota: int) -> None:
    if used_by_others + needed > quota:
        raise StorageFull(f"Writing {needed} bytes to {key!r} exceeds storage quota of {quota} bytes")


class MemoryBackend:
    """Process-local backend; nothing survives the process."""

    def __init__(self, quota_bytes: int = DEFAULT_STORAGE_QUOTA) -> None:
        self._quota = quota_bytes
        self._items: dict[str, bytes] = {}

    def read(self, key: str) -> bytes | None:
        return self._items.get(key)

    def write(self, key: str, value: bytes) -> None:
        used = sum(len(v) for k, v in self._items.items() if k != key)
        _check_quota(key, len(value), used, self._quota)
        self._items[key] = bytes(value)


class FileBackend:
    """One ``<key>.json`` file per key inside *directory*.

    Writes go through a temporary file and :func:`os.replace`, so readers
    see either the previous document or the new one.
    """

    def __init__(self, directory: str | os.PathLike[str], quota_bytes: int = DEFAULT_STORAGE_QUOTA) -> None:
        self._dir = Path(directory)
        self._quota = quota_bytes

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def read(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Could not read {path}: {exc}") from exc

    def write(self, key: str, value: bytes) -> None:
        path = self._path(key)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            used = sum(p.stat().st_size for p in self._dir.glob("*.json") if p != path)
            _check_quota(key, len(value), used, self._quota)

            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self._dir)
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            if exc.errno in _DISK_FULL_ERRNOS:
                raise StorageFull(f"Disk full while writing {path}") from exc
            raise StorageError(f"Could not write {path}: {exc}") from exc

        _logger.debug("Wrote %d bytes to %s", len(value), path)
