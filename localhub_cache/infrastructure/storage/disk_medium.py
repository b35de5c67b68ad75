"""Disk-backed storage medium built on diskcache.

Used for both slow tiers: the persistent tier lives in a fixed directory
under the user's home, the session tier in a temporary directory that is
removed when the medium is closed.
"""

import logging
import shutil
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Union

import diskcache as dc

from localhub_cache.domain.interfaces.storage import StorageError, StorageMedium, StorageQuotaExceededError

logger = logging.getLogger(__name__)

# Seconds diskcache waits on the SQLite lock before raising Timeout
DISK_TIMEOUT_SECONDS = 1

_DISK_ERRORS = (dc.Timeout, sqlite3.Error, OSError)

class DiskMedium(StorageMedium):
    """Raw string key-value medium stored in a diskcache directory."""

    def __init__(self, directory: Union[str, Path], size_limit_bytes: Optional[int] = None, ephemeral: bool = False):
        """Opens (creating if needed) the diskcache store.

        Args:
            directory: Directory holding the store.
            size_limit_bytes: Quota for keys plus raw values; None means unlimited.
            ephemeral: Remove the directory on close (session-scoped medium).

        Raises:
            StorageError: If the store cannot be opened.
        """
        self.directory = Path(directory)
        self.size_limit_bytes = size_limit_bytes
        self.ephemeral = ephemeral
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # eviction_policy='none': the cache layer owns expiry and quota handling
            self._cache = dc.Cache(str(self.directory), timeout=DISK_TIMEOUT_SECONDS, eviction_policy='none')
        except _DISK_ERRORS as e:
            raise StorageError(f"Failed to open disk store at {self.directory}: {e}") from e
        self._closed = False
        # Running total of key plus value lengths, seeded by one scan at open
        self._usage_lock = threading.Lock()
        self._usage = self._scan_usage()
        logger.info(f"Initialized disk storage medium at: {self.directory} (ephemeral={ephemeral})")

    @property
    def available(self) -> bool:
        return not self._closed

    def get_item(self, key: str) -> Optional[str]:
        try:
            raw = self._cache.get(key, default=None)
        except _DISK_ERRORS as e:
            raise StorageError(f"Failed to read key {key!r}: {e}") from e
        return raw if isinstance(raw, str) or raw is None else str(raw)

    def set_item(self, key: str, raw: str) -> None:
        with self._usage_lock:
            previous = self.get_item(key)
            delta = len(key) + len(raw)
            if previous is not None:
                delta -= len(key) + len(previous)
            projected = self._usage + delta
            if self.size_limit_bytes is not None and projected > self.size_limit_bytes:
                raise StorageQuotaExceededError(
                    f"Writing {key!r} would use {projected} bytes (limit {self.size_limit_bytes})"
                )
            try:
                self._cache.set(key, raw)
            except _DISK_ERRORS as e:
                raise StorageError(f"Failed to write key {key!r}: {e}") from e
            self._usage = projected

    def remove_item(self, key: str) -> None:
        with self._usage_lock:
            try:
                previous = self._cache.pop(key, default=None)
            except _DISK_ERRORS as e:
                raise StorageError(f"Failed to delete key {key!r}: {e}") from e
            if previous is not None:
                self._usage -= len(key) + len(str(previous))

    def keys(self) -> List[str]:
        try:
            return [k for k in self._cache.iterkeys() if isinstance(k, str)]
        except _DISK_ERRORS as e:
            raise StorageError(f"Failed to list keys: {e}") from e

    def _scan_usage(self) -> int:
        total = 0
        for key in self.keys():
            raw = self.get_item(key)
            if raw is not None:
                total += len(key) + len(raw)
        return total

    def usage_bytes(self) -> int:
        return self._usage

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cache.close()
        if self.ephemeral:
            shutil.rmtree(self.directory, ignore_errors=True)
            logger.debug(f"Removed ephemeral disk store: {self.directory}")
