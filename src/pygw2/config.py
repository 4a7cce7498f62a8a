"""Client configuration for pygw2."""

from __future__ import annotations

import dataclasses
import math
import os
from datetime import timedelta
from typing import Any

from pygw2._constants import BASE_URL, DEFAULT_CACHE_TTL_SECONDS, DEFAULT_STORAGE_QUOTA, STORAGE_KEY
from pygw2.exceptions import Gw2ConfigError


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise Gw2ConfigError(f"{env_key} must be a number, got {value!r}") from exc


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise Gw2ConfigError(f"{env_key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class Gw2Config:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        API base URL, without the ``/v1`` or ``/v2`` prefix.
    language : str or None
        Language code sent as ``lang`` on every request (e.g. ``"en"``).
        ``None`` leaves the API default.
    cache_ttl : float
        Seconds a cached record stays fresh. Defaults to 24 hours.
    storage_dir : str or None
        Directory holding the persisted cache document. ``None`` keeps
        the cache in memory for the lifetime of the process.
    storage_key : str
        Name of the persisted cache document.
    storage_quota : int
        Maximum number of bytes the storage backend accepts.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    """

    base_url: str = BASE_URL
    language: str | None = None
    cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS
    storage_dir: str | None = None
    storage_key: str = STORAGE_KEY
    storage_quota: int = DEFAULT_STORAGE_QUOTA
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.cache_ttl) or self.cache_ttl <= 0:
            raise Gw2ConfigError(f"cache_ttl must be a positive finite number, got {self.cache_ttl}")
        if self.storage_quota <= 0:
            raise Gw2ConfigError(f"storage_quota must be positive, got {self.storage_quota}")
        if not self.storage_key.strip():
            raise Gw2ConfigError("storage_key must be non-empty")

    @property
    def ttl(self) -> timedelta:
        """Freshness window as a :class:`~datetime.timedelta`."""
        return timedelta(seconds=self.cache_ttl)

    @classmethod
    def from_env(cls, **overrides: Any) -> Gw2Config:
        """Create configuration from ``GW2_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        Gw2ConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "GW2_BASE_URL": "base_url",
            "GW2_LANGUAGE": "language",
            "GW2_STORAGE_DIR": "storage_dir",
            "GW2_STORAGE_KEY": "storage_key",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # numeric fields, handled separately
        ttl_env = env.get("GW2_CACHE_TTL")
        if ttl_env is not None and "cache_ttl" not in overrides:
            config_kwargs["cache_ttl"] = _env_float("GW2_CACHE_TTL", ttl_env)

        quota_env = env.get("GW2_STORAGE_QUOTA")
        if quota_env is not None and "storage_quota" not in overrides:
            config_kwargs["storage_quota"] = _env_int("GW2_STORAGE_QUOTA", quota_env)

        timeout_env = env.get("GW2_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("GW2_REQUEST_TIMEOUT", timeout_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
