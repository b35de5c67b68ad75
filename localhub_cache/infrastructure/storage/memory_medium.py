"""In-process storage media: a dict stand-in and an always-absent medium."""

import logging
import threading
from typing import Dict, List, Optional

from localhub_cache.domain.interfaces.storage import StorageMedium, StorageQuotaExceededError

logger = logging.getLogger(__name__)

class MemoryMedium(StorageMedium):
    """Dict-backed medium used when no disk store is wanted (tests, dry runs)."""

    def __init__(self, size_limit_bytes: Optional[int] = None):
        self.size_limit_bytes = size_limit_bytes
        self._items: Dict[str, str] = {}
        self._lock = threading.Lock()

    @property
    def available(self) -> bool:
        return True

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, raw: str) -> None:
        with self._lock:
            if self.size_limit_bytes is not None:
                projected = sum(len(k) + len(v) for k, v in self._items.items() if k != key)
                projected += len(key) + len(raw)
                if projected > self.size_limit_bytes:
                    raise StorageQuotaExceededError(
                        f"Writing {key!r} would use {projected} bytes (limit {self.size_limit_bytes})"
                    )
            self._items[key] = raw

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items)

    def usage_bytes(self) -> int:
        with self._lock:
            return sum(len(k) + len(v) for k, v in self._items.items())


class UnavailableMedium(StorageMedium):
    """Null medium for hosts where no slow storage exists."""

    def __init__(self, reason: str = "storage medium not available"):
        self.reason = reason

    @property
    def available(self) -> bool:
        return False

    def get_item(self, key: str) -> Optional[str]:
        return None

    def set_item(self, key: str, raw: str) -> None:
        return None

    def remove_item(self, key: str) -> None:
        return None

    def keys(self) -> List[str]:
        return []

    def usage_bytes(self) -> int:
        return 0
