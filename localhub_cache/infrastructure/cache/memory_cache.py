"""In-memory bounded recency cache (fast tier).

Stores values with an absolute expiration timestamp, evicts the least
recently accessed entry when an insert would exceed max_size, and treats
expired entries as absent on read (lazy expiry).
"""

import fnmatch
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional

from localhub_cache.domain.interfaces.cache import CacheTier
from localhub_cache.domain.models.common import CacheKey, KeyPattern, MemoryCacheStats
from localhub_cache.domain.models.entry import CacheEntry, estimate_size_bytes
from localhub_cache.infrastructure.config.settings import MAX_CACHE_SIZE

logger = logging.getLogger(__name__)


def check_key(key: Any) -> None:
    """Raises TypeError for non-string keys."""
    if not isinstance(key, str):
        raise TypeError(f"cache keys must be str, not {type(key).__name__}")


class BoundedRecencyCache(CacheTier):
    """LRU cache with per-entry TTL and a hard entry-count bound."""

    def __init__(
        self,
        max_size: int = MAX_CACHE_SIZE,
        default_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initializes the cache.

        Args:
            max_size: Maximum number of entries held at any time.
            default_ttl: TTL in seconds applied when set() gets no ttl.
                None means entries never expire (still subject to eviction).
            clock: Source of the current Unix time, injectable for tests.
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = int(max_size)
        self.default_ttl = default_ttl
        self._clock = clock
        # Ordered from least to most recently accessed
        self._store: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._access_counter = 0
        self.hits = 0
        self.misses = 0
        self._lock = threading.RLock()
        logger.debug(f"BoundedRecencyCache initialized (max_size={self.max_size}, default_ttl={default_ttl})")

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(CacheKey(key))

    def _touch(self, entry: CacheEntry) -> None:
        self._access_counter += 1
        entry.last_access = self._access_counter
        self._store.move_to_end(entry.key, last=True)

    def _evict_lru(self) -> None:
        if not self._store:
            return
        oldest_key, _ = self._store.popitem(last=False)
        logger.debug(f"Memory cache EVICTED key (LRU): {oldest_key}")

    def get(self, key: CacheKey, default: Any = None) -> Any:
        check_key(key)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self.misses += 1
                return default

            if entry.is_expired(self._clock()):
                del self._store[key]
                self.misses += 1
                logger.debug(f"Memory cache EXPIRED key: {key}")
                return default

            self._touch(entry)
            self.hits += 1
            return entry.value

    def set(self, key: CacheKey, value: Any, ttl: Optional[float] = None) -> bool:
        check_key(key)
        effective_ttl = ttl if ttl is not None else self.default_ttl
        with self._lock:
            now = self._clock()
            if key not in self._store and len(self._store) >= self.max_size:
                self._evict_lru()

            entry = CacheEntry(
                key=key,
                value=value,
                expires_at=now + effective_ttl if effective_ttl is not None else None,
                approx_size_bytes=estimate_size_bytes(value),
                created_at=now,
            )
            self._store[key] = entry
            self._touch(entry)
        logger.debug(f"Memory cache PUT key: {key} TTL: {effective_ttl}s")
        return True

    def delete(self, key: CacheKey) -> None:
        check_key(key)
        with self._lock:
            self._store.pop(key, None)

    def has(self, key: CacheKey) -> bool:
        """Presence check honoring expiry. Does not change recency or counters."""
        check_key(key)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._store[key]
                return False
            return True

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._access_counter = 0
            self.hits = 0
            self.misses = 0
        logger.debug("Cleared memory cache.")

    def cleanup(self) -> int:
        """Removes physically expired entries and returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired_keys = [k for k, entry in self._store.items() if entry.is_expired(now)]
            for k in expired_keys:
                del self._store[k]
        if expired_keys:
            logger.debug(f"Memory cache cleanup removed {len(expired_keys)} expired entries")
        return len(expired_keys)

    def invalidate_pattern(self, pattern: KeyPattern) -> int:
        with self._lock:
            matched = [k for k in self._store if fnmatch.fnmatchcase(k, pattern)]
            for k in matched:
                del self._store[k]
        logger.debug(f"Memory cache invalidated pattern: {pattern} ({len(matched)} keys)")
        return len(matched)

    def keys(self, pattern: Optional[KeyPattern] = None) -> List[str]:
        with self._lock:
            if pattern is None:
                return list(self._store)
            return [k for k in self._store if fnmatch.fnmatchcase(k, pattern)]

    def entries(self, include_expired: bool = False) -> List[Dict[str, Any]]:
        """Returns a metadata snapshot of the entries, least recently used first."""
        result = []
        with self._lock:
            now = self._clock()
            for entry in self._store.values():
                expired = entry.is_expired(now)
                if expired and not include_expired:
                    continue
                result.append({
                    "key": entry.key,
                    "value": entry.value,
                    "created_at": entry.created_at,
                    "expires_at": entry.expires_at,
                    "is_expired": expired,
                    "ttl_remaining": entry.ttl_remaining(now),
                    "approx_size_bytes": entry.approx_size_bytes,
                })
        return result

    def stats(self) -> MemoryCacheStats:
        with self._lock:
            now = self._clock()
            total_requests = self.hits + self.misses
            hit_rate = (self.hits / total_requests) * 100 if total_requests > 0 else 0.0
            return {
                "size": len(self._store),
                "total_approx_size_bytes": sum(e.approx_size_bytes for e in self._store.values()),
                "expired_but_not_yet_evicted": sum(1 for e in self._store.values() if e.is_expired(now)),
                "max_size": self.max_size,
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": round(hit_rate, 2),
            }
