"""Records held by the persistent store and the document they live in.

The persisted JSON uses camelCase keys::

    {"floors": [{"id": 1, "continentId": 1, "data": {...}, "updatedAt": "..."}],
     "maps": [{"id": 15, "data": {...}, "updatedAt": "..."}],
     "events": {"data": [...], "updatedAt": "..."},
     "mapsData": {"data": {"maps": {...}}, "updatedAt": "..."}}

``data`` is stored and returned verbatim; nothing here interprets it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Collection(StrEnum):
    FLOORS = "floors"
    MAPS = "maps"
    EVENTS = "events"
    MAPS_DATA = "mapsData"


SINGLETON_COLLECTIONS = frozenset({Collection.EVENTS, Collection.MAPS_DATA})


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    data: Any
    updated_at: datetime

    @field_validator("updated_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class FloorRecord(_Record):
    """A continent floor, unique per ``(continent_id, floor_id)``."""

    continent_id: int
    floor_id: int = Field(alias="id")

    @property
    def key(self) -> tuple[int, int]:
        return (self.continent_id, self.floor_id)


class MapRecord(_Record):
    """A single map document, unique per ``map_id``."""

    map_id: int = Field(alias="id")

    @property
    def key(self) -> int:
        return self.map_id


class EventsRecord(_Record):
    """The whole events collection, cached and refreshed as one unit."""

    data: list[Any] = Field(default_factory=list)


class MapsIndexRecord(_Record):
    """Summary of every map, as ``{"maps": {map_id: summary}}``."""

    data: dict[str, Any] = Field(default_factory=lambda: {"maps": {}})


def empty_events(now: datetime) -> EventsRecord:
    return EventsRecord(data=[], updated_at=now)


def empty_maps_index(now: datetime) -> MapsIndexRecord:
    return MapsIndexRecord(data={"maps": {}}, updated_at=now)


class CacheDocument(BaseModel):
    """Everything the store persists, serialized as one document."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    floors: list[FloorRecord] = Field(default_factory=list)
    maps: list[MapRecord] = Field(default_factory=list)
    events: EventsRecord
    maps_data: MapsIndexRecord

    @classmethod
    def empty(cls, now: datetime) -> CacheDocument:
        """Default schema: no floors or maps, singletons seeded at *now*."""
        return cls(events=empty_events(now), maps_data=empty_maps_index(now))

    def to_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")
