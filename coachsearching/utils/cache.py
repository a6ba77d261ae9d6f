# ==============================================================================
# Caching Utilities
# ==============================================================================
"""
Caching utilities for read-mostly lookup data.
Entries are persisted in local storage as ``{data, timestamp}`` envelopes
with epoch-millisecond timestamps and expire after a fixed TTL.

An entry is in exactly one of three states: absent, expired (ignored on
read) or fresh (used in place of a network fetch).
"""

import time
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from coachsearching.utils.storage import LocalStorage, read_json, write_json

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


# ==============================================================================
# Cache Entry
# ==============================================================================

@dataclass(frozen=True)
class CacheEntry:
    """
    A cached value and the time it was written.

    Attributes:
        data: The cached payload (JSON-serializable)
        timestamp: Write time in epoch milliseconds
    """
    data: Any
    timestamp: int

    def age_ms(self, now: int) -> int:
        """Milliseconds elapsed since the entry was written."""
        return now - self.timestamp

    def is_fresh(self, now: int, ttl_ms: int) -> bool:
        """True while ``now - timestamp < ttl_ms``."""
        return self.age_ms(now) < ttl_ms

    def to_dict(self) -> dict:
        return {"data": self.data, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["CacheEntry"]:
        """Decode an envelope, returning None for anything malformed."""
        if not isinstance(raw, dict) or "data" not in raw:
            return None
        timestamp = raw.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            return None
        return cls(data=raw["data"], timestamp=int(timestamp))


# ==============================================================================
# Storage-backed TTL Cache
# ==============================================================================

class StorageTTLCache:
    """
    TTL cache persisted in a LocalStorage.

    Attributes:
        storage: Backing local storage
        ttl_seconds: Time-to-live for each entry

    Example:
        cache = StorageTTLCache(storage, ttl_seconds=86400)  # 24 hour TTL
        cache.set("cs_cities", cities)
        cities = cache.get("cs_cities")
    """

    def __init__(
        self,
        storage: LocalStorage,
        ttl_seconds: float = 86400.0,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize storage TTL cache.

        Args:
            storage: Backing local storage
            ttl_seconds: Time-to-live in seconds
            clock: Callable returning epoch milliseconds
        """
        self.storage = storage
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._hits = 0
        self._misses = 0

    @property
    def ttl_ms(self) -> int:
        return int(self.ttl_seconds * 1000)

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Get the raw entry for a key, fresh or not."""
        return CacheEntry.from_dict(read_json(self.storage, key))

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a fresh value from cache.

        Args:
            key: Storage key
            default: Returned when the entry is absent, expired or corrupt

        Returns:
            Cached data or default
        """
        entry = self.get_entry(key)
        if entry is not None and entry.is_fresh(self._clock(), self.ttl_ms):
            self._hits += 1
            return entry.data

        if entry is not None:
            logger.debug(f"Cache entry expired: {key}")
        self._misses += 1
        return default

    def set(self, key: str, data: Any) -> Optional[CacheEntry]:
        """
        Write a value stamped with the current time.

        Returns:
            The written entry, or None if the data could not be encoded
        """
        entry = CacheEntry(data=data, timestamp=self._clock())
        if not write_json(self.storage, key, entry.to_dict()):
            return None
        return entry

    def invalidate(self, key: str) -> None:
        """Remove an entry."""
        self.storage.remove_item(key)

    def stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache stats
        """
        total = self._hits + self._misses
        return {
            "ttl": self.ttl_seconds,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total > 0 else 0.0,
        }
