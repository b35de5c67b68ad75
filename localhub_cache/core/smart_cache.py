"""Smart cache facade chaining the three cache tiers.

Lookup order is fixed: memory -> session -> persistent. A hit in a slow
tier is promoted into the memory tier before it is returned, with the
memory default TTL capped at the time left on the slow-tier record.
Writes always go to memory and to exactly one slow tier, chosen by the
`persistent` flag.
"""

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from localhub_cache.domain.models.common import CacheKey, KeyPattern
from localhub_cache.infrastructure.cache.memory_cache import BoundedRecencyCache
from localhub_cache.infrastructure.cache.storage_adapter import TieredStorageAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class SmartCache:
    """Single lookup chain over the memory, session and persistent tiers."""

    def __init__(
        self,
        memory: BoundedRecencyCache,
        session: TieredStorageAdapter,
        persistent: TieredStorageAdapter,
    ):
        self._memory = memory
        self._session = session
        self._persistent = persistent

    @property
    def memory(self) -> BoundedRecencyCache:
        return self._memory

    @property
    def session(self) -> TieredStorageAdapter:
        return self._session

    @property
    def persistent(self) -> TieredStorageAdapter:
        return self._persistent

    def get(self, key: CacheKey, default: Any = None) -> Any:
        """Returns the first hit walking memory, session, then persistent storage."""
        value = self._memory.get(key, _MISSING)
        if value is not _MISSING:
            return value

        for tier in (self._session, self._persistent):
            envelope = tier.get_entry(key)
            if envelope is not None:
                self._promote(key, envelope.value, tier.remaining_ttl(envelope))
                logger.debug(f"Promoted key {key} from {tier.name} tier to memory")
                return envelope.value

        return default

    def _promote(self, key: CacheKey, value: Any, remaining: Optional[float]) -> None:
        # The memory copy never outlives the slow-tier record
        ttl = self._memory.default_ttl
        if remaining is not None:
            ttl = remaining if ttl is None else min(ttl, remaining)
        self._memory.set(key, value, ttl)

    def set(self, key: CacheKey, value: Any, ttl: Optional[float] = None, persistent: bool = False) -> None:
        """Writes to memory and to the persistent or session tier (never both)."""
        self._memory.set(key, value, ttl)
        slow_tier = self._persistent if persistent else self._session
        if not slow_tier.set(key, value, ttl):
            logger.debug(f"Slow tier {slow_tier.name} dropped write for key {key}")

    def remove(self, key: CacheKey) -> None:
        """Removes the key from all three tiers."""
        self._memory.delete(key)
        self._session.remove(key)
        self._persistent.remove(key)

    def invalidate_pattern(self, pattern: KeyPattern) -> int:
        """Removes keys matching a glob pattern from every tier.

        Returns:
            Total number of removed entries across tiers.
        """
        removed = (
            self._memory.invalidate_pattern(pattern)
            + self._session.invalidate_pattern(pattern)
            + self._persistent.invalidate_pattern(pattern)
        )
        logger.info(f"Invalidated pattern {pattern!r}: {removed} entries removed")
        return removed

    def get_or_set(
        self,
        key: CacheKey,
        factory: Callable[[], T],
        ttl: Optional[float] = None,
        persistent: bool = False,
    ) -> T:
        """Read-through helper: returns the cached value or computes and stores it."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        result = factory()
        self.set(key, result, ttl=ttl, persistent=persistent)
        return result

    def cached(
        self,
        key_func: Callable[..., str],
        ttl: Optional[float] = None,
        persistent: bool = False,
    ) -> Callable[[Callable[..., T]], Callable[..., T]]:
        """Decorator caching a function's result under key_func(*args, **kwargs).

        Args:
            key_func: Builds the cache key from the call arguments.
            ttl: TTL in seconds for stored results.
            persistent: Store results in the persistent tier instead of the session tier.
        """
        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            @functools.wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> T:
                key = CacheKey(key_func(*args, **kwargs))
                return self.get_or_set(key, lambda: func(*args, **kwargs), ttl=ttl, persistent=persistent)
            return wrapper
        return decorator
