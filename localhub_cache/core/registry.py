"""Cache registry: the tiers, facade, strategies and maintenance built once at startup.

Components that need caching receive the registry (or one of its members)
explicitly instead of importing a module-level singleton.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from localhub_cache.core.maintenance import CacheMaintenance
from localhub_cache.core.smart_cache import SmartCache
from localhub_cache.core.strategies import CacheStrategies
from localhub_cache.domain.interfaces.storage import StorageMedium
from localhub_cache.domain.models.common import CachePrefix, TIER_PERSISTENT, TIER_SESSION
from localhub_cache.infrastructure.cache.memory_cache import BoundedRecencyCache
from localhub_cache.infrastructure.cache.storage_adapter import TieredStorageAdapter
from localhub_cache.infrastructure.config.settings import CacheSettings, get_cache_settings
from localhub_cache.infrastructure.storage.factory import create_medium

logger = logging.getLogger(__name__)


@dataclass
class CacheRegistry:
    """Owns every cache component for the lifetime of the application."""
    settings: CacheSettings
    memory: BoundedRecencyCache
    session: TieredStorageAdapter
    persistent: TieredStorageAdapter
    smart_cache: SmartCache
    strategies: CacheStrategies
    maintenance: CacheMaintenance

    def close(self) -> None:
        """Stops the sweeper and releases both storage media."""
        self.maintenance.stop()
        for adapter in (self.session, self.persistent):
            try:
                adapter.medium.close()
            except Exception as e:
                logger.warning(f"Failed to close {adapter.name} medium: {e}")

    def __enter__(self) -> "CacheRegistry":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def build_cache_registry(
    settings: Optional[CacheSettings] = None,
    session_medium: Optional[StorageMedium] = None,
    persistent_medium: Optional[StorageMedium] = None,
    clock: Callable[[], float] = time.time,
    start_maintenance: Optional[bool] = None,
) -> CacheRegistry:
    """Builds and wires all cache components.

    Args:
        settings: Resolved settings (loaded from configuration if None).
        session_medium: Medium for the session tier (temporary disk store if None).
        persistent_medium: Medium for the persistent tier (settings.persistent_dir if None).
        clock: Unix time source shared by all tiers.
        start_maintenance: Start the background sweeper (settings.auto_cleanup if None).
    """
    settings = settings or get_cache_settings()

    # Validates max_size before any medium (and its temporary directory) exists
    memory = BoundedRecencyCache(max_size=settings.max_cache_size, default_ttl=settings.default_ttl, clock=clock)

    opened: List[StorageMedium] = []
    try:
        if session_medium is None:
            session_medium = create_medium(
                settings.storage_backend,
                size_limit_bytes=settings.storage_quota_bytes,
                ephemeral=True,
            )
            opened.append(session_medium)
        if persistent_medium is None:
            persistent_medium = create_medium(
                settings.storage_backend,
                directory=settings.persistent_dir,
                size_limit_bytes=settings.storage_quota_bytes,
            )
            opened.append(persistent_medium)

        session = TieredStorageAdapter(
            session_medium,
            CachePrefix(settings.session_prefix),
            default_ttl=settings.default_ttl,
            name=TIER_SESSION,
            clock=clock,
        )
        persistent = TieredStorageAdapter(
            persistent_medium,
            CachePrefix(settings.persistent_prefix),
            default_ttl=settings.default_ttl,
            name=TIER_PERSISTENT,
            clock=clock,
        )
        smart_cache = SmartCache(memory, session, persistent)
        strategies = CacheStrategies.create(
            smart_cache,
            business_search_ttl=settings.business_search_ttl,
            user_data_ttl=settings.user_data_ttl,
            static_data_ttl=settings.static_data_ttl,
            api_ttl=settings.default_ttl,
        )
        maintenance = CacheMaintenance(smart_cache, interval=settings.cleanup_interval)
    except Exception:
        # Media created here are released; injected media belong to the caller
        for medium in opened:
            medium.close()
        raise

    if start_maintenance is None:
        start_maintenance = settings.auto_cleanup
    if start_maintenance:
        maintenance.start()

    logger.info(
        f"Cache registry initialized. memory(max={settings.max_cache_size}, ttl={settings.default_ttl}s), "
        f"session(available={session.available}), persistent(available={persistent.available})"
    )
    return CacheRegistry(
        settings=settings,
        memory=memory,
        session=session,
        persistent=persistent,
        smart_cache=smart_cache,
        strategies=strategies,
        maintenance=maintenance,
    )
