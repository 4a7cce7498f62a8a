"""Continent floor endpoints.

Two structurally different sources exist for the same floor:

  - /v2/continents/{continent_id}/floors/{floor_id} (regions keyed by id)
  - /v1/map_floor.json?continent_id=..&floor=.. (legacy document shape)

Callers decide which one they want; both return the document verbatim.
"""

from __future__ import annotations

from typing import Any

from pygw2._api._common import build_params, require_object
from pygw2._transport import Transport
from pygw2.config import Gw2Config

MAP_FLOOR_ENDPOINT = "/v1/map_floor.json"


def continent_floor_endpoint(continent_id: int, floor_id: int) -> str:
    return f"/v2/continents/{int(continent_id)}/floors/{int(floor_id)}"


async def fetch_continent_floor(
    config: Gw2Config,
    transport: Transport,
    continent_id: int,
    floor_id: int,
) -> dict[str, Any]:
    endpoint = continent_floor_endpoint(continent_id, floor_id)
    payload = await transport.get_json(endpoint, build_params(config))
    return require_object(endpoint, payload)


async def fetch_map_floor(
    config: Gw2Config,
    transport: Transport,
    continent_id: int,
    floor_id: int,
) -> dict[str, Any]:
    params = build_params(config, continent_id=int(continent_id), floor=int(floor_id))
    payload = await transport.get_json(MAP_FLOOR_ENDPOINT, params)
    return require_object(MAP_FLOOR_ENDPOINT, payload)
