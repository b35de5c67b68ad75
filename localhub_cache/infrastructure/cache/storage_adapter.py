"""Slow-tier cache adapter.

Wraps a StorageMedium behind the same get/set contract as the in-memory
tier. Values are stored as JSON envelopes with an embedded expiry, under
`prefix + key` so several namespaces can share one medium.

Every failure (serialization, unavailable medium, quota) degrades to a
cache miss or a dropped write with a logged warning.
"""

import fnmatch
import logging
import time
from typing import Any, Callable, List, Optional

from localhub_cache.domain.interfaces.cache import CacheTier
from localhub_cache.domain.interfaces.storage import StorageError, StorageMedium, StorageQuotaExceededError
from localhub_cache.domain.models.common import CacheKey, CachePrefix, KeyPattern, StorageTierStats
from localhub_cache.domain.models.entry import StoredEnvelope
from localhub_cache.infrastructure.cache.memory_cache import check_key

logger = logging.getLogger(__name__)


class TieredStorageAdapter(CacheTier):
    """Cache tier storing envelopes in a slow key-value medium."""

    def __init__(
        self,
        medium: StorageMedium,
        prefix: CachePrefix,
        default_ttl: Optional[float] = None,
        name: str = "storage",
        clock: Callable[[], float] = time.time,
    ):
        self.medium = medium
        self.prefix = prefix
        self.default_ttl = default_ttl
        self.name = name
        self._clock = clock

    @property
    def available(self) -> bool:
        return self.medium.available

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _raw_key(self, key: str) -> str:
        return self.prefix + key

    def _owned(self, raw_key: str) -> bool:
        return raw_key.startswith(self.prefix)

    def _discard(self, raw_key: str) -> None:
        try:
            self.medium.remove_item(raw_key)
        except StorageError as e:
            logger.warning(f"[{self.name}] Failed to remove {raw_key!r}: {e}")

    def _read(self, raw_key: str) -> Optional[StoredEnvelope]:
        """Reads and validates one record, dropping it if corrupt or expired."""
        try:
            raw = self.medium.get_item(raw_key)
        except StorageError as e:
            logger.warning(f"[{self.name}] Read failed for {raw_key!r}: {e}")
            return None
        if raw is None:
            return None

        try:
            envelope = StoredEnvelope.from_json(raw)
        except ValueError as e:
            logger.warning(f"[{self.name}] Discarding unreadable record {raw_key!r}: {e}")
            self._discard(raw_key)
            return None

        if envelope.is_expired(self._now_ms()):
            self._discard(raw_key)
            return None
        return envelope

    def get_entry(self, key: CacheKey) -> Optional[StoredEnvelope]:
        """Returns the live envelope stored under key, or None on a miss."""
        check_key(key)
        if not self.available:
            return None
        envelope = self._read(self._raw_key(key))
        if envelope is None:
            logger.debug(f"[{self.name}] MISS for key: {key}")
            return None
        logger.debug(f"[{self.name}] HIT for key: {key}")
        return envelope

    def get(self, key: CacheKey, default: Any = None) -> Any:
        envelope = self.get_entry(key)
        return default if envelope is None else envelope.value

    def remaining_ttl(self, envelope: StoredEnvelope) -> Optional[float]:
        """Seconds until the envelope expires by this tier's clock (None = never)."""
        return envelope.ttl_remaining(self._now_ms())

    def set(self, key: CacheKey, value: Any, ttl: Optional[float] = None) -> bool:
        check_key(key)
        if not self.available:
            return False

        effective_ttl = ttl if ttl is not None else self.default_ttl
        now_ms = self._now_ms()
        try:
            # int() rejects inf and nan ttl values (OverflowError / ValueError)
            expiry = now_ms + int(effective_ttl * 1000) if effective_ttl is not None else None
        except (OverflowError, ValueError) as e:
            logger.warning(f"[{self.name}] Invalid ttl {effective_ttl!r} for key {key!r}: {e}")
            return False
        envelope = StoredEnvelope(value=value, expiry=expiry, timestamp=now_ms)
        try:
            raw = envelope.to_json()
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning(f"[{self.name}] Cannot serialize value for key {key!r}: {e}")
            return False

        raw_key = self._raw_key(key)
        try:
            self.medium.set_item(raw_key, raw)
        except StorageQuotaExceededError as e:
            # Medium is full: drop expired records of this namespace and retry once
            logger.info(f"[{self.name}] Quota exceeded writing {key!r}, sweeping expired entries: {e}")
            self.clean_expired()
            try:
                self.medium.set_item(raw_key, raw)
            except StorageError as retry_error:
                logger.warning(f"[{self.name}] Write dropped for key {key!r}: {retry_error}")
                return False
        except StorageError as e:
            logger.warning(f"[{self.name}] Write dropped for key {key!r}: {e}")
            return False

        logger.debug(f"[{self.name}] PUT key: {key} TTL: {effective_ttl}s")
        return True

    def remove(self, key: CacheKey) -> None:
        check_key(key)
        if self.available:
            self._discard(self._raw_key(key))

    def delete(self, key: CacheKey) -> None:
        self.remove(key)

    def _raw_keys(self) -> List[str]:
        if not self.available:
            return []
        try:
            return [k for k in self.medium.keys() if self._owned(k)]
        except StorageError as e:
            logger.warning(f"[{self.name}] Failed to list keys: {e}")
            return []

    def keys(self, pattern: Optional[KeyPattern] = None) -> List[str]:
        names = [k[len(self.prefix):] for k in self._raw_keys()]
        if pattern is None:
            return names
        return [k for k in names if fnmatch.fnmatchcase(k, pattern)]

    def count(self) -> int:
        """Number of records in the medium that belong to this namespace."""
        return len(self._raw_keys())

    def clear(self) -> None:
        raw_keys = self._raw_keys()
        for raw_key in raw_keys:
            self._discard(raw_key)
        if raw_keys:
            logger.info(f"[{self.name}] Cleared {len(raw_keys)} entries.")

    def invalidate_pattern(self, pattern: KeyPattern) -> int:
        matched = self.keys(pattern)
        for key in matched:
            self._discard(self._raw_key(key))
        return len(matched)

    def clean_expired(self) -> int:
        """Removes expired and unreadable records of this namespace.

        Returns:
            The number of records removed.
        """
        removed = 0
        now_ms = self._now_ms()
        for raw_key in self._raw_keys():
            try:
                raw = self.medium.get_item(raw_key)
            except StorageError as e:
                logger.warning(f"[{self.name}] Sweep could not read {raw_key!r}: {e}")
                continue
            if raw is None:
                continue
            try:
                expired = StoredEnvelope.from_json(raw).is_expired(now_ms)
            except ValueError:
                expired = True
            if expired:
                self._discard(raw_key)
                removed += 1
        if removed:
            logger.debug(f"[{self.name}] Sweep removed {removed} entries.")
        return removed

    def usage_bytes(self) -> Optional[int]:
        if not self.available:
            return None
        try:
            return self.medium.usage_bytes()
        except StorageError as e:
            logger.warning(f"[{self.name}] Could not compute usage: {e}")
            return None

    def stats(self) -> StorageTierStats:
        return {
            "name": self.name,
            "available": self.available,
            "entries": self.count(),
            "usage_bytes": self.usage_bytes(),
        }
