"""Internal constants shared across the library."""

BASE_URL = "https://api.guildwars2.com"
USER_AGENT = "pygw2/0 (+aiohttp)"

#: Records older than this are refetched on the next read (24 hours).
DEFAULT_CACHE_TTL_SECONDS: float = 24 * 3600

#: Name of the single persisted cache document.
STORAGE_KEY = "gw2db"

#: Same ceiling browsers apply to local storage per origin.
DEFAULT_STORAGE_QUOTA = 5 * 1024 * 1024

#: The batch floor path only ever addresses Tyria.
BATCH_CONTINENT_ID = 1
