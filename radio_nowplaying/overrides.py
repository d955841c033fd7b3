"""
Metadata override resolution for Radio Now Playing

Operators correct bad upstream metadata by adding a row to meta_overrides
keyed by the exact raw metadata string. Every resolution looks its raw key
up, so lookups go through a small TTL cache in front of the database.

Cache behavior:
- Unbounded map keyed by raw metadata
- Both hits and misses ("no override") are cached for cache_ttl seconds
- Expiry is checked lazily on read (no background sweep)
- Database errors propagate and are never cached
"""

import threading
import time
import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL = 60

_MISSING = object()


class CacheEntry:
    """A single cache entry with value and expiration"""

    def __init__(self, value: Any, expires_at: float):
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        """Check if cache entry has expired"""
        return self.expires_at <= now


class OverrideCache:
    """In-memory expiring map for override lookups"""

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._stats = {
            'hits': 0,
            'misses': 0,
        }

    def get(self, key: str) -> Any:
        """Get a cached value

        Returns:
            Cached value (which may be None for a cached "no override"),
            or the module's _MISSING sentinel if absent or expired
        """
        with self._lock:
            entry = self._cache.get(key)

            if entry is None or entry.is_expired(self._clock()):
                self._stats['misses'] += 1
                return _MISSING

            self._stats['hits'] += 1
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Cache a value for ttl seconds"""
        with self._lock:
            self._cache[key] = CacheEntry(value, self._clock() + self.ttl)

    def invalidate(self, key: str) -> bool:
        """Drop a single key

        Returns:
            True if the key was cached
        """
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry"""
        with self._lock:
            self._cache.clear()

    def get_stats(self) -> Dict[str, int]:
        """Get cache statistics"""
        with self._lock:
            return {**self._stats, 'size': len(self._cache)}

    def __len__(self):
        return len(self._cache)


class OverrideResolver:
    """Looks up the active override for a raw metadata key

    Args:
        store: Object with get_meta_override(raw_metadata) (NowPlayingDatabase)
        cache: OverrideCache (a fresh one with the default TTL if omitted)
    """

    def __init__(self, store, cache: Optional[OverrideCache] = None):
        self.store = store
        self.cache = cache if cache is not None else OverrideCache()

    def resolve(self, raw_metadata: str) -> Optional[Dict[str, Any]]:
        """Get the override for raw_metadata

        Args:
            raw_metadata: Raw metadata key

        Returns:
            Override dict (see database.queries) or None
        """
        key = (raw_metadata or "").strip()
        if not key:
            return None

        cached = self.cache.get(key)
        if cached is not _MISSING:
            return cached

        override = self.store.get_meta_override(key)
        self.cache.set(key, override)

        if override:
            logger.info(f"Override #{override['id']} found for '{key}'")
        else:
            logger.debug(f"No override for '{key}'")

        return override

    def invalidate(self, raw_metadata: str) -> None:
        """Forget the cached lookup for a key (after the operator edits it)"""
        key = (raw_metadata or "").strip()
        if key and self.cache.invalidate(key):
            logger.debug(f"Invalidated cached override for '{key}'")
