"""Selects a storage medium for a slow tier based on configuration and host capability."""

import logging
import tempfile
from pathlib import Path
from typing import Optional, Union

from localhub_cache.domain.interfaces.storage import StorageError, StorageMedium
from localhub_cache.infrastructure.storage.disk_medium import DiskMedium
from localhub_cache.infrastructure.storage.memory_medium import MemoryMedium, UnavailableMedium

logger = logging.getLogger(__name__)

BACKEND_DISK = "disk"
BACKEND_MEMORY = "memory"
BACKEND_NONE = "none"
SESSION_DIR_PREFIX = "localhub_session_"

def create_medium(
    kind: str = BACKEND_DISK,
    directory: Optional[Union[str, Path]] = None,
    size_limit_bytes: Optional[int] = None,
    ephemeral: bool = False,
) -> StorageMedium:
    """Creates the medium for one slow tier.

    A disk medium that cannot be opened degrades to UnavailableMedium, so the
    tier turns into a no-op instead of failing the caller.

    Args:
        kind: 'disk', 'memory' or 'none'.
        directory: Disk store directory. With ephemeral=True and no directory,
            a fresh temporary directory is used.
        size_limit_bytes: Quota for the medium.
        ephemeral: Remove the disk store when the medium is closed.
    """
    if kind == BACKEND_NONE:
        logger.info("Slow storage tier disabled by configuration.")
        return UnavailableMedium("disabled by configuration")

    if kind == BACKEND_MEMORY:
        return MemoryMedium(size_limit_bytes=size_limit_bytes)

    if kind != BACKEND_DISK:
        raise ValueError(f"Unknown storage backend: {kind!r}")

    try:
        if directory is None:
            if not ephemeral:
                raise ValueError("A directory is required for a persistent disk medium")
            directory = tempfile.mkdtemp(prefix=SESSION_DIR_PREFIX)
        return DiskMedium(directory, size_limit_bytes=size_limit_bytes, ephemeral=ephemeral)
    except (StorageError, OSError) as e:
        logger.warning(f"Disk storage unavailable, tier disabled: {e}")
        return UnavailableMedium(str(e))
