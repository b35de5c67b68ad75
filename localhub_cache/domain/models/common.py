"""Defines common Value Objects used across the cache tiers.

These objects represent simple values or concepts like cache keys, glob
patterns and the statistics shapes reported by each tier.
"""

from typing import NewType, Optional, TypedDict

# === Caching Context ===
CacheKey = NewType("CacheKey", str)              # Exact, case-sensitive key of a cache entry
CachePrefix = NewType("CachePrefix", str)        # Namespace prefix inside a storage medium (e.g., 'cache_')
KeyPattern = NewType("KeyPattern", str)          # Glob pattern used only for bulk invalidation ('search:*')

# Tier names used by the facade, maintenance and the CLI
TIER_MEMORY = "memory"
TIER_SESSION = "session"
TIER_PERSISTENT = "persistent"
TIER_ALL = "all"
TIER_NAMES = (TIER_MEMORY, TIER_SESSION, TIER_PERSISTENT)

# --- Structured Data ---
class MemoryCacheStats(TypedDict):
    """Statistics reported by the in-memory tier."""
    size: int
    total_approx_size_bytes: int
    expired_but_not_yet_evicted: int
    max_size: int
    hits: int
    misses: int
    hit_rate: float

class StorageTierStats(TypedDict):
    """Statistics reported by a slow storage tier."""
    name: str
    available: bool
    entries: int
    usage_bytes: Optional[int]

class AggregateCacheStats(TypedDict):
    """Combined statistics for all three tiers."""
    memory: MemoryCacheStats
    session: StorageTierStats
    local: StorageTierStats
