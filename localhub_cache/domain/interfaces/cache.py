"""Interface for cache tiers.

Defines the contract shared by the in-memory tier and the slow storage
tiers, so the smart cache can chain them in a fixed lookup order.
"""

import abc
from typing import Any, Dict, List, Optional

from localhub_cache.domain.models.common import CacheKey, KeyPattern

class CacheTier(abc.ABC):
    """Abstract Base Class for a single cache tier."""

    @abc.abstractmethod
    def get(self, key: CacheKey, default: Any = None) -> Any:
        """Retrieves a value from this tier.

        Expired entries are treated as absent and removed.

        Args:
            key: The exact cache key.
            default: Returned when the key is absent or expired.

        Returns:
            The cached value, or `default`.
        """
        pass

    @abc.abstractmethod
    def set(self, key: CacheKey, value: Any, ttl: Optional[float] = None) -> bool:
        """Stores a value in this tier.

        Args:
            key: The exact cache key.
            value: A JSON-compatible value.
            ttl: Time-to-live in seconds (uses the tier default if None).

        Returns:
            True if the value was stored, False if the write was dropped.
        """
        pass

    @abc.abstractmethod
    def delete(self, key: CacheKey) -> None:
        """Removes a key from this tier. No error if absent."""
        pass

    @abc.abstractmethod
    def clear(self) -> None:
        """Removes every entry owned by this tier."""
        pass

    @abc.abstractmethod
    def invalidate_pattern(self, pattern: KeyPattern) -> int:
        """Removes all keys matching a glob pattern ('*' wildcard).

        Returns:
            The number of removed entries.
        """
        pass

    @abc.abstractmethod
    def keys(self, pattern: Optional[KeyPattern] = None) -> List[str]:
        """Returns the keys currently held, optionally filtered by a glob pattern."""
        pass

    @abc.abstractmethod
    def stats(self) -> Dict[str, Any]:
        """Returns tier statistics."""
        pass
