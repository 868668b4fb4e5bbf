"""In-memory cache for upstream reference data (brokers, lease spaces)."""

import logging
import time
from typing import Any, Optional

logger = logging.getLogger(__name__)


class CacheEntry:
    """Cache entry with optional TTL support.

    An entry created without a TTL never expires.
    """

    def __init__(self, data: Any, ttl_seconds: Optional[float] = None):
        self.data = data
        self.created_at = time.monotonic()
        self.ttl = ttl_seconds

    def is_expired(self) -> bool:
        """Check if the cache entry has expired."""
        if self.ttl is None:
            return False
        return time.monotonic() - self.created_at > self.ttl


class MemoryCache:
    """Keyed cache of upstream payloads.

    Example:
        cache = MemoryCache()
        cache.set("brokers", brokers)                    # process lifetime
        cache.set("lease_spaces", spaces, ttl=86400)     # one day
        brokers = cache.get("brokers")
    """

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return cached data, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            logger.debug(f"Cache expired: {key}")
            del self._entries[key]
            return None
        logger.debug(f"Cache hit: {key}")
        return entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        self._entries[key] = CacheEntry(data, ttl)
        logger.debug(f"Cached: {key}")

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cached entries."""
        self._entries.clear()
