"""Interface for the key-value media behind the slow cache tiers.

A medium stores raw strings under string keys, survives longer than the
process-local fast tier, and may be entirely absent on the current host.
"""

import abc
from typing import List, Optional

class StorageError(Exception):
    """Raised by a medium when a read or write cannot be completed."""
    pass

class StorageQuotaExceededError(StorageError):
    """Raised by a medium when a write would exceed its capacity."""
    pass

class StorageMedium(abc.ABC):
    """Abstract Base Class for a raw string key-value medium."""

    @property
    @abc.abstractmethod
    def available(self) -> bool:
        """Whether the medium exists on this host and accepts operations."""
        pass

    @abc.abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Returns the raw string stored under `key`, or None.

        Raises:
            StorageError: If the medium cannot be read.
        """
        pass

    @abc.abstractmethod
    def set_item(self, key: str, raw: str) -> None:
        """Stores `raw` under `key`, replacing any previous value.

        Raises:
            StorageQuotaExceededError: If the write would exceed capacity.
            StorageError: If the medium cannot be written.
        """
        pass

    @abc.abstractmethod
    def remove_item(self, key: str) -> None:
        """Removes `key` if present."""
        pass

    @abc.abstractmethod
    def keys(self) -> List[str]:
        """Returns a snapshot of every key in the medium."""
        pass

    @abc.abstractmethod
    def usage_bytes(self) -> int:
        """Approximate number of bytes held (keys plus raw values)."""
        pass

    def close(self) -> None:
        """Releases resources held by the medium."""
        pass
