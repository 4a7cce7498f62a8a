from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import pytest

from pygw2.exceptions import Gw2Error, StorageFull
from pygw2.storage.backends import MemoryBackend
from pygw2.storage.schema import Collection, EventsRecord, FloorRecord
from pygw2.storage.store import PersistentStore


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _store(backend: MemoryBackend | None = None) -> PersistentStore:
    return PersistentStore(backend or MemoryBackend(), clock=_dt).load()


def test_load_without_document_starts_empty() -> None:
    store = _store()

    doc = store.document
    assert doc.floors == []
    assert doc.maps == []
    assert doc.events.data == []
    assert doc.events.updated_at == _dt()
    assert doc.maps_data.data == {"maps": {}}
    assert doc.maps_data.updated_at == _dt()


@pytest.mark.parametrize(
    "raw",
    [
        b"{not json",
        b"\xff\xfe\x00",
        b"[1, 2, 3]",
        b'{"floors": [{"id": "first", "continentId": 1}]}',
        b'{"maps": "nope"}',
    ],
)
def test_corrupt_document_resets_to_defaults(raw: bytes) -> None:
    backend = MemoryBackend()
    backend.write("gw2db", raw)

    store = _store(backend)

    doc = store.document
    assert doc.floors == []
    assert doc.maps == []
    assert doc.events.data == []
    assert store.get(Collection.MAPS, 15) is None


def test_missing_singletons_are_seeded_on_load() -> None:
    backend = MemoryBackend()
    backend.write(
        "gw2db",
        json.dumps(
            {"maps": [{"id": 15, "data": {"name": "Queensdale"}, "updatedAt": "2025-12-31T00:00:00.000Z"}]}
        ).encode(),
    )

    store = _store(backend)

    record = store.get_map(15)
    assert record is not None
    assert record.data == {"name": "Queensdale"}
    assert record.updated_at == datetime(2025, 12, 31, tzinfo=UTC)
    assert store.get_events().updated_at == _dt()
    assert store.get_maps().data == {"maps": {}}


def test_get_before_load_raises() -> None:
    store = PersistentStore(MemoryBackend())
    with pytest.raises(Gw2Error, match="load"):
        store.get(Collection.EVENTS)


def test_put_replaces_existing_key_in_place() -> None:
    store = _store()

    store.put(Collection.FLOORS, (1, 2), {"v": 1}, _dt())
    store.put(Collection.FLOORS, (1, 3), {"v": 1}, _dt())
    store.put(Collection.FLOORS, (1, 2), {"v": 2}, _dt() + timedelta(hours=1))

    doc = store.document
    assert [f.key for f in doc.floors] == [(1, 2), (1, 3)]
    record = store.get_floor(1, 2)
    assert record is not None
    assert record.data == {"v": 2}
    assert record.updated_at == _dt() + timedelta(hours=1)


def test_floors_are_keyed_by_continent_and_floor() -> None:
    store = _store()

    store.save_floor(1, 1, {"continent": 1})
    store.save_floor(2, 1, {"continent": 2})

    first = store.get_floor(1, 1)
    second = store.get_floor(2, 1)
    assert first is not None and second is not None
    assert first.data == {"continent": 1}
    assert second.data == {"continent": 2}
    assert store.get_floor(3, 1) is None


def test_put_defaults_timestamp_to_clock() -> None:
    store = _store()

    record = store.save_events([{"id": "EV-1"}])

    assert isinstance(record, EventsRecord)
    assert record.updated_at == _dt()
    assert store.get(Collection.EVENTS) == record


def test_put_copies_value() -> None:
    store = _store()
    payload = {"regions": {"1": {"name": "Kryta"}}}

    store.save_map(15, payload)
    payload["regions"]["1"]["name"] = "changed"

    record = store.get_map(15)
    assert record is not None
    assert record.data["regions"]["1"]["name"] == "Kryta"


def test_put_persists_whole_document_in_wire_format() -> None:
    backend = MemoryBackend()
    store = _store(backend)

    store.save_floor(1, 2, {"id": 2})
    store.save_maps({"maps": {"15": {"map_name": "Queensdale"}}})

    raw = backend.read("gw2db")
    assert raw is not None
    persisted = json.loads(raw)
    assert set(persisted) == {"floors", "maps", "events", "mapsData"}
    assert persisted["floors"][0]["id"] == 2
    assert persisted["floors"][0]["continentId"] == 1
    assert "updatedAt" in persisted["floors"][0]
    assert persisted["mapsData"]["data"] == {"maps": {"15": {"map_name": "Queensdale"}}}


def test_reload_round_trips_records() -> None:
    backend = MemoryBackend()
    store = _store(backend)
    store.save_floor(1, 2, {"id": 2})
    store.save_map(15, {"id": 15})

    reloaded = _store(backend)

    floor = reloaded.get_floor(1, 2)
    assert isinstance(floor, FloorRecord)
    assert floor.data == {"id": 2}
    assert floor.updated_at == _dt()
    assert floor.updated_at.tzinfo is not None
    assert reloaded.document.model_dump() == store.document.model_dump()


def test_storage_full_keeps_in_memory_update() -> None:
    backend = MemoryBackend(quota_bytes=16)
    store = _store(backend)

    with pytest.raises(StorageFull):
        store.save_map(15, {"id": 15})

    record = store.get_map(15)
    assert record is not None
    assert record.data == {"id": 15}
    assert backend.read("gw2db") is None


def test_string_collection_names_are_accepted() -> None:
    store = _store()

    store.put("mapsData", None, {"maps": {"1": {}}})

    assert store.get("mapsData") == store.get_maps()
