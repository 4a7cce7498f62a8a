"""HTTP transport returning decoded JSON documents."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pygw2._constants import USER_AGENT
from pygw2.config import Gw2Config
from pygw2.exceptions import RemoteFetchError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        ...


class HttpTransport:
    """GET-only JSON transport over a shared :class:`aiohttp.ClientSession`."""

    def __init__(self, config: Gw2Config, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        """Fetch *endpoint* and return the decoded JSON body.

        Raises
        ------
        RemoteFetchError
            On connection failure, timeout, a non-2xx status or a body
            that is not JSON.
        """
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        url = f"{self._config.base_url.rstrip('/')}{endpoint}"

        _logger.debug("GET %s params=%s", url, dict(params) if params else {})

        try:
            async with self._http.get(url, params=params, headers=headers) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise RemoteFetchError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except RemoteFetchError:
            raise
        except asyncio.TimeoutError as exc:
            raise RemoteFetchError(
                f"Request to {endpoint} timed out",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise RemoteFetchError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise RemoteFetchError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
