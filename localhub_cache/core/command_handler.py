"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the
work to the cache registry (smart cache, tiers and maintenance), reporting
results through the UserInterface. Each handler returns True on success.
"""

import json
import logging
import math
from typing import Optional

from localhub_cache.core.registry import CacheRegistry
from localhub_cache.domain.interfaces.user_interface import UserInterface
from localhub_cache.domain.models.common import (
    CacheKey,
    KeyPattern,
    TIER_ALL,
    TIER_MEMORY,
    TIER_NAMES,
    TIER_PERSISTENT,
    TIER_SESSION,
)

logger = logging.getLogger(__name__)

_MISSING = object()

class CommandHandler:
    """Handles incoming commands and delegates to the cache components."""

    def __init__(self, registry: CacheRegistry, ui: UserInterface):
        self.registry = registry
        self.ui = ui

    def handle_stats(self) -> bool:
        """Handles the 'stats' command."""
        stats = self.registry.maintenance.get_stats()
        self.ui.display_stats(stats)
        return True

    def handle_get(self, key: str) -> bool:
        """Handles the 'get' command: prints the value or reports a miss."""
        value = self.registry.smart_cache.get(CacheKey(key), _MISSING)
        if value is _MISSING:
            self.ui.display_warning(f"Cache miss for key '{key}'.")
            return False
        self.ui.display_output(json.dumps(value, indent=2, default=str), title=key)
        return True

    def handle_set(self, key: str, raw_value: str, ttl: Optional[float] = None, persistent: bool = False) -> bool:
        """Handles the 'set' command. The value is given as JSON text."""
        try:
            value = json.loads(raw_value)
        except ValueError as e:
            self.ui.display_error(f"Value is not valid JSON: {e}")
            return False
        if ttl is not None and not (math.isfinite(ttl) and ttl > 0):
            self.ui.display_error("TTL must be a positive number of seconds.")
            return False

        self.registry.smart_cache.set(CacheKey(key), value, ttl=ttl, persistent=persistent)
        tier = TIER_PERSISTENT if persistent else TIER_SESSION
        self.ui.display_info(f"Stored '{key}' in memory and {tier} tiers.")
        return True

    def handle_delete(self, key: str) -> bool:
        """Handles the 'delete' command."""
        self.registry.smart_cache.remove(CacheKey(key))
        self.ui.display_info(f"Removed '{key}' from all tiers.")
        return True

    def handle_invalidate(self, pattern: str) -> bool:
        """Handles the 'invalidate' command (glob pattern across all tiers)."""
        removed = self.registry.smart_cache.invalidate_pattern(KeyPattern(pattern))
        self.ui.display_info(f"Invalidated {removed} entries matching '{pattern}'.")
        return True

    def handle_sweep(self) -> bool:
        """Handles the 'sweep' command: purge expired entries from the slow tiers."""
        removed = self.registry.maintenance.clean_expired()
        summary = ", ".join(f"{tier}={count}" for tier, count in removed.items())
        self.ui.display_info(f"Removed expired entries: {summary}.")
        return True

    def handle_clear_cache(self, level: str) -> bool:
        """Handles the 'clear-cache' command."""
        logger.info(f"Handling 'clear-cache' command for level: {level}")
        if level not in TIER_NAMES + (TIER_ALL,):
            self.ui.display_error(f"Invalid cache level. Choose one of: {', '.join(TIER_NAMES + (TIER_ALL,))}.")
            return False

        if level == TIER_ALL:
            self.registry.maintenance.clear_all()
        elif level == TIER_MEMORY:
            self.registry.memory.clear()
        elif level == TIER_SESSION:
            self.registry.session.clear()
        else:
            self.registry.persistent.clear()
        self.ui.display_info(f"Cache level '{level}' cleared successfully.")
        return True
