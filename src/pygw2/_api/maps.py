"""Map endpoints.

Endpoints:
  - /v2/maps/{map_id} (single map)
  - /v1/maps.json (index of every map, keyed by map id)
"""

from __future__ import annotations

from typing import Any

from pygw2._api._common import build_params, require_object
from pygw2._transport import Transport
from pygw2.config import Gw2Config

MAPS_INDEX_ENDPOINT = "/v1/maps.json"


def map_endpoint(map_id: int) -> str:
    return f"/v2/maps/{int(map_id)}"


async def fetch_map(config: Gw2Config, transport: Transport, map_id: int) -> dict[str, Any]:
    endpoint = map_endpoint(map_id)
    payload = await transport.get_json(endpoint, build_params(config))
    return require_object(endpoint, payload)


async def fetch_maps_index(config: Gw2Config, transport: Transport) -> dict[str, Any]:
    """Fetch the map index (``{"maps": {map_id: summary}}``)."""
    payload = await transport.get_json(MAPS_INDEX_ENDPOINT, build_params(config))
    return require_object(MAPS_INDEX_ENDPOINT, payload)
