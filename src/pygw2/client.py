"""High-level async client for the GW2 API with a persistent TTL cache."""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from typing import Any

import aiohttp

from pygw2._api import continents as _continents_api
from pygw2._api import events as _events_api
from pygw2._api import maps as _maps_api
from pygw2._constants import BATCH_CONTINENT_ID
from pygw2._transport import HttpTransport, Transport
from pygw2.config import Gw2Config
from pygw2.exceptions import Gw2Error, StorageError
from pygw2.storage.backends import FileBackend, MemoryBackend, StorageBackend
from pygw2.storage.policy import is_fresh
from pygw2.storage.schema import SINGLETON_COLLECTIONS, Collection
from pygw2.storage.store import PersistentStore, Record

_logger = logging.getLogger(__name__)


def _build_store(config: Gw2Config) -> PersistentStore:
    backend: StorageBackend
    if config.storage_dir:
        backend = FileBackend(config.storage_dir, quota_bytes=config.storage_quota)
    else:
        backend = MemoryBackend(quota_bytes=config.storage_quota)
    return PersistentStore(backend, key=config.storage_key)


class Gw2Client:
    """Async cache-aside client for the Guild Wars 2 API.

    Every read checks the store first and only goes to the network when
    the record is missing or older than ``config.cache_ttl``. Fetched
    documents are written back before being returned.

    Usage::

        async with Gw2Client(config, store=store) as client:
            floors = await client.get_continent_floors([1, 2, 3])
    """

    def __init__(
        self,
        config: Gw2Config | None = None,
        *,
        store: PersistentStore | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or Gw2Config()
        self._store = store if store is not None else _build_store(self._config)
        if not self._store.loaded:
            self._store.load()
        self._clock = clock or self._store.clock
        self._external_session = session is not None
        self._http_session = session
        self._external_transport = transport is not None
        self._transport: Transport | None = transport

    @property
    def store(self) -> PersistentStore:
        return self._store

    @property
    def config(self) -> Gw2Config:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Gw2Client:
        if self._external_transport:
            return self
        if self._http_session is None:
            timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)
            self._http_session = aiohttp.ClientSession(timeout=timeout)
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise Gw2Error("Client not initialized. Use 'async with Gw2Client(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Cache-aside core
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=UTC)
        return now

    def _is_servable(self, collection: Collection, record: Record | None) -> bool:
        if record is None:
            return False
        # Singletons are seeded empty at load time; an empty seed is a miss.
        if collection in SINGLETON_COLLECTIONS and not _has_content(record.data):
            return False
        return is_fresh(record.updated_at, self._now(), self._config.ttl)

    def _write_back(self, collection: Collection, key: Any, data: Any) -> None:
        try:
            self._store.put(collection, key, data, self._now())
        except StorageError:
            _logger.warning("Could not persist %s %s; serving from memory", collection, key, exc_info=True)

    async def _cached(
        self,
        collection: Collection,
        key: Any,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Serve a fresh record or fetch, store and return a new one.

        Remote failures propagate unchanged; a stale record is never used
        as a fallback.
        """
        record = self._store.get(collection, key)
        if self._is_servable(collection, record):
            assert record is not None  # noqa: S101
            _logger.debug("Cache hit: %s %s", collection, key)
            return copy.deepcopy(record.data)

        _logger.debug("Cache %s: %s %s", "stale" if record is not None else "miss", collection, key)
        data = await fetch()
        self._write_back(collection, key, data)
        return data

    # ------------------------------------------------------------------
    # Public reads
    # ------------------------------------------------------------------

    async def get_events(self) -> list[Any]:
        """Return every event, refreshed as a single unit.

        An empty list is indistinguishable from the empty seed written at
        load time, so an empty remote response is fetched again on every
        call instead of being served from the cache.
        """
        transport = self._require_transport()
        result: list[Any] = await self._cached(
            Collection.EVENTS,
            None,
            lambda: _events_api.fetch_events(self._config, transport),
        )
        return result

    async def get_map(self, map_id: int) -> dict[str, Any]:
        transport = self._require_transport()
        map_id = int(map_id)
        result: dict[str, Any] = await self._cached(
            Collection.MAPS,
            map_id,
            lambda: _maps_api.fetch_map(self._config, transport, map_id),
        )
        return result

    async def get_maps(self) -> dict[str, Any]:
        """Return the map index, ``{"maps": {map_id: summary}}``."""
        transport = self._require_transport()
        result: dict[str, Any] = await self._cached(
            Collection.MAPS_DATA,
            None,
            lambda: _maps_api.fetch_maps_index(self._config, transport),
        )
        return result

    async def _get_continent_floor(self, floor_id: int) -> dict[str, Any]:
        transport = self._require_transport()
        key = (BATCH_CONTINENT_ID, floor_id)
        result: dict[str, Any] = await self._cached(
            Collection.FLOORS,
            key,
            lambda: _continents_api.fetch_continent_floor(self._config, transport, BATCH_CONTINENT_ID, floor_id),
        )
        return result

    async def get_continent_floors(self, floor_ids: Sequence[int]) -> list[dict[str, Any]]:
        """Resolve floors of continent 1 concurrently, in input order.

        Any failing floor fails the whole call. Floors still in flight at
        that point are not cancelled; they finish and are written back.
        """
        self._require_transport()
        ids = [int(floor_id) for floor_id in floor_ids]
        if not ids:
            return []
        results = await asyncio.gather(*(self._get_continent_floor(floor_id) for floor_id in ids))
        return list(results)

    async def get_map_floor(self, continent_id: int, floor_id: int) -> dict[str, Any]:
        """Fetch a floor from the legacy v1 endpoint.

        Shares cache keys with :meth:`get_continent_floors`, but the v1
        document has a different shape. Whichever accessor stores a key
        first decides what the other one is served until the record
        goes stale.
        """
        transport = self._require_transport()
        continent_id, floor_id = int(continent_id), int(floor_id)
        result: dict[str, Any] = await self._cached(
            Collection.FLOORS,
            (continent_id, floor_id),
            lambda: _continents_api.fetch_map_floor(self._config, transport, continent_id, floor_id),
        )
        return result


def _has_content(data: Any) -> bool:
    if isinstance(data, dict) and set(data) == {"maps"}:
        return bool(data["maps"])
    return bool(data)
