"""Cache maintenance: periodic sweep of the slow tiers, statistics, full invalidation."""

import logging
import threading
from typing import Dict, Optional

from localhub_cache.core.smart_cache import SmartCache
from localhub_cache.domain.models.common import AggregateCacheStats, TIER_PERSISTENT, TIER_SESSION
from localhub_cache.infrastructure.config.settings import CLEANUP_INTERVAL

logger = logging.getLogger(__name__)


class CacheMaintenance:
    """Sweeps expired entries on a background thread and reports tier statistics."""

    def __init__(self, cache: SmartCache, interval: float = CLEANUP_INTERVAL):
        """Initializes the maintenance helper.

        Args:
            cache: The smart cache whose tiers are maintained.
            interval: Seconds between background sweeps.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.cache = cache
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def clean_expired(self) -> Dict[str, int]:
        """Removes expired records from the session and persistent tiers.

        The memory tier is left alone; it expires lazily on read.

        Returns:
            Number of removed records per tier.
        """
        removed = {}
        for tier_name, tier in ((TIER_SESSION, self.cache.session), (TIER_PERSISTENT, self.cache.persistent)):
            try:
                removed[tier_name] = tier.clean_expired()
            except Exception as e:
                # A broken tier must not stop the sweep of the other one
                logger.warning(f"Sweep of {tier_name} tier failed: {e}", exc_info=True)
                removed[tier_name] = 0
        logger.debug(f"Expired entry sweep finished: {removed}")
        return removed

    def get_stats(self) -> AggregateCacheStats:
        return {
            "memory": self.cache.memory.stats(),
            "session": self.cache.session.stats(),
            "local": self.cache.persistent.stats(),
        }

    def clear_all(self) -> None:
        """Empties all three tiers (e.g., on logout)."""
        self.cache.memory.clear()
        self.cache.session.clear()
        self.cache.persistent.clear()
        logger.info("Cleared memory, session and persistent cache tiers.")

    # --- Background Sweeper ---

    def _run(self) -> None:
        logger.debug(f"Cache sweeper started (interval={self.interval}s)")
        while not self._stop_event.wait(self.interval):
            self.clean_expired()
        logger.debug("Cache sweeper stopped")

    def start(self) -> None:
        """Starts the background sweeper. No-op if it is already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="localhub-cache-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stops the background sweeper and waits for it to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
