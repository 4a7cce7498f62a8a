"""Shared helpers for GW2 API endpoint modules.

It is internal to pygw2 and may change at any time.
"""

from __future__ import annotations

from typing import Any

from pygw2.config import Gw2Config
from pygw2.exceptions import RemoteFetchError


def build_params(config: Gw2Config, **extra: int | str) -> dict[str, str]:
    """Build query parameters, adding ``lang`` when a language is configured."""
    params = {key: str(value) for key, value in extra.items()}
    if config.language:
        params["lang"] = config.language
    return params


def require_object(endpoint: str, payload: Any) -> dict[str, Any]:
    """Return *payload* if it is a JSON object, else raise."""
    if not isinstance(payload, dict):
        raise RemoteFetchError(
            f"Expected a JSON object from {endpoint}, got {type(payload).__name__}",
            endpoint=endpoint,
        )
    return payload


def require_list(endpoint: str, payload: Any) -> list[Any]:
    """Return *payload* if it is a JSON array, else raise."""
    if not isinstance(payload, list):
        raise RemoteFetchError(
            f"Expected a JSON array from {endpoint}, got {type(payload).__name__}",
            endpoint=endpoint,
        )
    return payload
