"""Persistent cache store.

Holds the four collections in one in-memory :class:`CacheDocument` and
rewrites the whole document to the backend after every write. Document
size is bounded by the number of distinct floors and maps requested, not
by API traffic, so the full rewrite stays small.

``put`` never awaits, so within one event loop a mutation and its
serialization cannot interleave with another write. Two processes sharing
one backend still race: the last full rewrite wins.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from pygw2._constants import STORAGE_KEY
from pygw2.exceptions import Gw2Error, StorageCorrupt
from pygw2.storage.backends import StorageBackend
from pygw2.storage.schema import (
    CacheDocument,
    Collection,
    EventsRecord,
    FloorRecord,
    MapRecord,
    MapsIndexRecord,
    empty_events,
    empty_maps_index,
)

_logger = logging.getLogger(__name__)

Record = FloorRecord | MapRecord | EventsRecord | MapsIndexRecord


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PersistentStore:
    """Cache store over a synchronous :class:`StorageBackend`.

    Usage::

        store = PersistentStore(FileBackend("~/.cache/pygw2")).load()
        record = store.get(Collection.MAPS, 15)
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        key: str = STORAGE_KEY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._backend = backend
        self._key = key
        self._clock = clock
        self._doc: CacheDocument | None = None

    @property
    def clock(self) -> Callable[[], datetime]:
        return self._clock

    @property
    def loaded(self) -> bool:
        return self._doc is not None

    @property
    def document(self) -> CacheDocument:
        """Deep copy of the in-memory document."""
        return self._require_doc().model_copy(deep=True)

    # ------------------------------------------------------------------
    # Load / persist
    # ------------------------------------------------------------------

    def load(self) -> PersistentStore:
        """Read the persisted document, falling back to an empty cache.

        A missing document and a corrupt one both yield the default
        schema; neither raises.
        """
        raw = self._backend.read(self._key)
        if raw is None:
            _logger.debug("No persisted cache under %r, starting empty", self._key)
            self._doc = CacheDocument.empty(self._clock())
            return self

        try:
            self._doc = self._decode(raw)
        except StorageCorrupt:
            _logger.warning("Persisted cache %r is corrupt, resetting to empty", self._key, exc_info=True)
            self._doc = CacheDocument.empty(self._clock())
        return self

    def _decode(self, raw: bytes) -> CacheDocument:
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StorageCorrupt(f"Cache document {self._key!r} is not valid JSON") from exc

        if not isinstance(payload, dict):
            raise StorageCorrupt(f"Cache document {self._key!r} is not a JSON object")

        # Singletons always exist once loaded.
        now = self._clock()
        if payload.get("events") is None:
            payload["events"] = empty_events(now).model_dump(by_alias=True)
        if payload.get("mapsData") is None:
            payload["mapsData"] = empty_maps_index(now).model_dump(by_alias=True)

        try:
            return CacheDocument.model_validate(payload)
        except ValidationError as exc:
            raise StorageCorrupt(f"Cache document {self._key!r} does not match the schema") from exc

    def _save(self) -> None:
        self._backend.write(self._key, self._require_doc().to_bytes())

    def _require_doc(self) -> CacheDocument:
        if self._doc is None:
            raise Gw2Error("Store not loaded. Call PersistentStore.load() first")
        return self._doc

    # ------------------------------------------------------------------
    # Generic access
    # ------------------------------------------------------------------

    def get(self, collection: Collection, key: Any = None) -> Record | None:
        """Return the record stored under *key*, or ``None``.

        Floors are keyed by ``(continent_id, floor_id)``, maps by
        ``map_id``; singleton collections take no key.
        """
        collection = Collection(collection)
        doc = self._require_doc()
        if collection is Collection.FLOORS:
            continent_id, floor_id = key
            return next((f for f in doc.floors if f.key == (continent_id, floor_id)), None)
        if collection is Collection.MAPS:
            return next((m for m in doc.maps if m.key == key), None)
        if collection is Collection.EVENTS:
            return doc.events
        return doc.maps_data

    def put(
        self,
        collection: Collection,
        key: Any,
        value: Any,
        timestamp: datetime | None = None,
    ) -> Record:
        """Upsert *value* under *key* and persist the whole document.

        The in-memory document is updated before the backend write, so if
        the backend raises :class:`~pygw2.exceptions.StorageFull` the new
        record is still served for the rest of the session.
        """
        collection = Collection(collection)
        doc = self._require_doc()
        updated_at = timestamp if timestamp is not None else self._clock()
        data = copy.deepcopy(value)

        record: Record
        if collection is Collection.FLOORS:
            continent_id, floor_id = key
            record = FloorRecord(continent_id=continent_id, floor_id=floor_id, data=data, updated_at=updated_at)
            _upsert(doc.floors, record)
        elif collection is Collection.MAPS:
            record = MapRecord(map_id=key, data=data, updated_at=updated_at)
            _upsert(doc.maps, record)
        elif collection is Collection.EVENTS:
            record = EventsRecord(data=data, updated_at=updated_at)
            doc.events = record
        else:
            record = MapsIndexRecord(data=data, updated_at=updated_at)
            doc.maps_data = record

        self._save()
        return record

    # ------------------------------------------------------------------
    # Typed helpers
    # ------------------------------------------------------------------

    def get_floor(self, continent_id: int, floor_id: int) -> FloorRecord | None:
        record = self.get(Collection.FLOORS, (continent_id, floor_id))
        assert record is None or isinstance(record, FloorRecord)  # noqa: S101
        return record

    def save_floor(self, continent_id: int, floor_id: int, data: Any) -> FloorRecord:
        record = self.put(Collection.FLOORS, (continent_id, floor_id), data)
        assert isinstance(record, FloorRecord)  # noqa: S101
        return record

    def get_map(self, map_id: int) -> MapRecord | None:
        record = self.get(Collection.MAPS, map_id)
        assert record is None or isinstance(record, MapRecord)  # noqa: S101
        return record

    def save_map(self, map_id: int, data: Any) -> MapRecord:
        record = self.put(Collection.MAPS, map_id, data)
        assert isinstance(record, MapRecord)  # noqa: S101
        return record

    def get_events(self) -> EventsRecord:
        return self._require_doc().events

    def save_events(self, data: list[Any]) -> EventsRecord:
        record = self.put(Collection.EVENTS, None, data)
        assert isinstance(record, EventsRecord)  # noqa: S101
        return record

    def get_maps(self) -> MapsIndexRecord:
        return self._require_doc().maps_data

    def save_maps(self, data: dict[str, Any]) -> MapsIndexRecord:
        record = self.put(Collection.MAPS_DATA, None, data)
        assert isinstance(record, MapsIndexRecord)  # noqa: S101
        return record


def _upsert(records: list[Any], record: FloorRecord | MapRecord) -> None:
    for index, existing in enumerate(records):
        if existing.key == record.key:
            records[index] = record
            return
    records.append(record)
