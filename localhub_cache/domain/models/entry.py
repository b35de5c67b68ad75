"""Cache entry and persisted envelope models.

`CacheEntry` is the in-memory record held by the fast tier. `StoredEnvelope`
is the wrapper serialized into a slow storage tier:

    {"version": 1, "value": ..., "expiry": <epoch ms | null>, "timestamp": <epoch ms>}
"""

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

ENVELOPE_VERSION = 1
# Size used for statistics when a value cannot be serialized
DEFAULT_ENTRY_SIZE_BYTES = 1000


def estimate_size_bytes(value: Any) -> int:
    """Returns the UTF-8 length of the JSON form of `value`.

    Falls back to DEFAULT_ENTRY_SIZE_BYTES for cyclic or non-JSON values.
    """
    try:
        return len(json.dumps(value).encode("utf-8"))
    except (TypeError, ValueError, RecursionError):
        logger.debug(f"Could not size value of type {type(value).__name__}, using default estimate.")
        return DEFAULT_ENTRY_SIZE_BYTES


@dataclass
class CacheEntry:
    """Internal representation of a fast-tier entry."""
    key: str
    value: Any
    expires_at: Optional[float]  # Unix timestamp, None = never expires
    approx_size_bytes: int
    created_at: float
    last_access: int = 0  # Access counter value at the last set/get

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at

    def ttl_remaining(self, now: float) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - now)


def _is_epoch_ms(value: Any) -> bool:
    # bool is an int subclass; inf and nan cannot be converted to int
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


@dataclass
class StoredEnvelope:
    """Serialized wrapper written to a slow tier."""
    value: Any
    expiry: Optional[int]  # epoch milliseconds
    timestamp: int         # epoch milliseconds of the write
    version: int = ENVELOPE_VERSION

    def is_expired(self, now_ms: int) -> bool:
        return self.expiry is not None and now_ms > self.expiry

    def ttl_remaining(self, now_ms: int) -> Optional[float]:
        """Seconds left before expiry, None if the record never expires."""
        if self.expiry is None:
            return None
        return max(0.0, (self.expiry - now_ms) / 1000)

    def to_json(self) -> str:
        """Serializes the envelope. Raises TypeError/ValueError for non-JSON values."""
        return json.dumps({
            "version": self.version,
            "value": self.value,
            "expiry": self.expiry,
            "timestamp": self.timestamp,
        })

    @classmethod
    def from_json(cls, raw: str) -> "StoredEnvelope":
        """Parses a stored record.

        Raises:
            ValueError: If the record is not valid JSON, is not an envelope,
                or carries an unknown version.
        """
        data = json.loads(raw)
        if not isinstance(data, dict) or "value" not in data:
            raise ValueError("record is not a cache envelope")

        version = data.get("version")
        if version != ENVELOPE_VERSION:
            raise ValueError(f"unsupported envelope version: {version!r}")

        expiry = data.get("expiry")
        timestamp = data.get("timestamp")
        if expiry is not None and not _is_epoch_ms(expiry):
            raise ValueError(f"invalid expiry: {expiry!r}")
        if not _is_epoch_ms(timestamp):
            raise ValueError(f"invalid timestamp: {timestamp!r}")

        return cls(
            value=data["value"],
            expiry=int(expiry) if expiry is not None else None,
            timestamp=int(timestamp),
            version=version,
        )
