from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from pygw2.exceptions import StorageFull
from pygw2.storage.backends import FileBackend, MemoryBackend
from pygw2.storage.policy import is_fresh

TTL = timedelta(hours=24)
NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("age", "expected"),
    [
        (timedelta(0), True),
        (TTL - timedelta(milliseconds=1), True),
        (TTL, False),
        (TTL + timedelta(milliseconds=1), False),
        (timedelta(days=30), False),
    ],
)
def test_is_fresh_boundary(age: timedelta, expected: bool) -> None:
    assert is_fresh(NOW - age, NOW, TTL) is expected


def test_future_timestamp_counts_as_fresh() -> None:
    assert is_fresh(NOW + timedelta(minutes=5), NOW, TTL) is True


def test_memory_backend_rejects_writes_over_quota() -> None:
    backend = MemoryBackend(quota_bytes=10)
    backend.write("a", b"12345")

    with pytest.raises(StorageFull):
        backend.write("b", b"123456")

    assert backend.read("a") == b"12345"
    assert backend.read("b") is None


def test_memory_backend_replacing_a_key_frees_its_old_size() -> None:
    backend = MemoryBackend(quota_bytes=10)
    backend.write("a", b"123456789")
    backend.write("a", b"987654321")

    assert backend.read("a") == b"987654321"


def test_file_backend_reads_missing_key_as_none(tmp_path: Path) -> None:
    assert FileBackend(tmp_path / "cache").read("gw2db") is None


def test_file_backend_writes_and_reads(tmp_path: Path) -> None:
    backend = FileBackend(tmp_path / "cache")

    backend.write("gw2db", b'{"floors": []}')
    backend.write("gw2db", b'{"maps": []}')

    assert backend.read("gw2db") == b'{"maps": []}'
    assert sorted(p.name for p in (tmp_path / "cache").iterdir()) == ["gw2db.json"]


def test_file_backend_quota_spans_all_keys(tmp_path: Path) -> None:
    backend = FileBackend(tmp_path, quota_bytes=10)
    backend.write("one", b"123456")

    with pytest.raises(StorageFull):
        backend.write("two", b"12345")

    assert backend.read("two") is None
    backend.write("one", b"1234567890")
    assert backend.read("one") == b"1234567890"
