"""Events endpoint.

Endpoint:
  - /v2/events
"""

from __future__ import annotations

from typing import Any

from pygw2._api._common import build_params, require_list
from pygw2._transport import Transport
from pygw2.config import Gw2Config

EVENTS_ENDPOINT = "/v2/events"


async def fetch_events(config: Gw2Config, transport: Transport) -> list[Any]:
    """Fetch the full events collection as one list."""
    payload = await transport.get_json(EVENTS_ENDPOINT, build_params(config))
    return require_list(EVENTS_ENDPOINT, payload)
