"""Cache freshness policy.

Pure functions only: callers pass in the current time.
"""

from __future__ import annotations

from datetime import datetime, timedelta


def is_fresh(updated_at: datetime, now: datetime, ttl: timedelta) -> bool:
    """A record is fresh while less than *ttl* has passed since it was written."""
    return now - updated_at < ttl
