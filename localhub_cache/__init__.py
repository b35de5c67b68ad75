"""LocalHub tiered cache.

In-memory LRU/TTL cache backed by session-scoped and persistent storage tiers,
with domain key strategies and maintenance utilities.
"""

__version__ = "1.0.0"
