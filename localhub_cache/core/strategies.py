"""Domain cache strategies.

Each strategy fixes a key shape and TTL for one data category and delegates
storage to the SmartCache. Key functions are pure and case-sensitive, so
the same inputs always address the same entry.

    business search   search:<query>:<location>    memory + session
    user profile      user:<user_id>               memory + persistent
    static reference  static:<type>                memory + persistent
    API response      api:<url>:<json(params)>     memory only
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from localhub_cache.core.smart_cache import SmartCache
from localhub_cache.domain.models.common import CacheKey, KeyPattern
from localhub_cache.infrastructure.config.settings import (
    BUSINESS_SEARCH_TTL,
    DEFAULT_TTL,
    STATIC_DATA_TTL,
    USER_DATA_TTL,
)

logger = logging.getLogger(__name__)


def canonical_json(value: Any) -> str:
    """Deterministic JSON: sorted keys, compact separators."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


class CacheStrategy:
    """Base class binding a key prefix, a TTL and a tier choice to a SmartCache."""

    prefix = ""
    persistent = False

    def __init__(self, cache: SmartCache, ttl: float):
        self.cache = cache
        self.ttl = ttl

    def _get(self, key: CacheKey, default: Any = None) -> Any:
        return self.cache.get(key, default)

    def _set(self, key: CacheKey, value: Any) -> None:
        self.cache.set(key, value, ttl=self.ttl, persistent=self.persistent)

    def invalidate_all(self) -> int:
        """Drops every entry of this category from all tiers."""
        return self.cache.invalidate_pattern(KeyPattern(f"{self.prefix}:*"))


class BusinessSearchCache(CacheStrategy):
    prefix = "search"

    def __init__(self, cache: SmartCache, ttl: float = BUSINESS_SEARCH_TTL):
        super().__init__(cache, ttl)

    @staticmethod
    def key(query: str, location: str) -> CacheKey:
        return CacheKey(f"search:{query}:{location}")

    def get(self, query: str, location: str, default: Any = None) -> Any:
        return self._get(self.key(query, location), default)

    def set(self, query: str, location: str, results: Any) -> None:
        self._set(self.key(query, location), results)

    def invalidate(self, query: str, location: str) -> None:
        self.cache.remove(self.key(query, location))


class UserDataCache(CacheStrategy):
    prefix = "user"
    persistent = True

    def __init__(self, cache: SmartCache, ttl: float = USER_DATA_TTL):
        super().__init__(cache, ttl)

    @staticmethod
    def key(user_id: str) -> CacheKey:
        return CacheKey(f"user:{user_id}")

    def get(self, user_id: str, default: Any = None) -> Any:
        return self._get(self.key(user_id), default)

    def set(self, user_id: str, data: Any) -> None:
        self._set(self.key(user_id), data)

    def invalidate(self, user_id: str) -> None:
        """Drops a user's profile, e.g. after the user updates it."""
        self.cache.remove(self.key(user_id))


class StaticDataCache(CacheStrategy):
    prefix = "static"
    persistent = True

    def __init__(self, cache: SmartCache, ttl: float = STATIC_DATA_TTL):
        super().__init__(cache, ttl)

    @staticmethod
    def key(data_type: str) -> CacheKey:
        return CacheKey(f"static:{data_type}")

    def get(self, data_type: str, default: Any = None) -> Any:
        return self._get(self.key(data_type), default)

    def set(self, data_type: str, data: Any) -> None:
        self._set(self.key(data_type), data)

    def invalidate(self, data_type: str) -> None:
        self.cache.remove(self.key(data_type))


class ApiResponseCache(CacheStrategy):
    """API responses live in the memory tier only."""

    prefix = "api"

    def __init__(self, cache: SmartCache, ttl: float = DEFAULT_TTL):
        super().__init__(cache, ttl)

    @staticmethod
    def key(url: str, params: Optional[Mapping[str, Any]] = None) -> CacheKey:
        return CacheKey(f"api:{url}:{canonical_json(dict(params or {}))}")

    def get(self, url: str, params: Optional[Mapping[str, Any]] = None, default: Any = None) -> Any:
        return self.cache.memory.get(self.key(url, params), default)

    def set(self, url: str, params: Optional[Mapping[str, Any]], response: Any) -> None:
        self.cache.memory.set(self.key(url, params), response, self.ttl)

    def invalidate(self, url: str, params: Optional[Mapping[str, Any]] = None) -> None:
        self.cache.memory.delete(self.key(url, params))

    def invalidate_all(self) -> int:
        return self.cache.memory.invalidate_pattern(KeyPattern(f"{self.prefix}:*"))


@dataclass
class CacheStrategies:
    """One instance of each domain strategy, sharing a SmartCache."""
    business_search: BusinessSearchCache
    user_data: UserDataCache
    static_data: StaticDataCache
    api_response: ApiResponseCache

    @classmethod
    def create(
        cls,
        cache: SmartCache,
        business_search_ttl: float = BUSINESS_SEARCH_TTL,
        user_data_ttl: float = USER_DATA_TTL,
        static_data_ttl: float = STATIC_DATA_TTL,
        api_ttl: float = DEFAULT_TTL,
    ) -> "CacheStrategies":
        return cls(
            business_search=BusinessSearchCache(cache, business_search_ttl),
            user_data=UserDataCache(cache, user_data_ttl),
            static_data=StaticDataCache(cache, static_data_ttl),
            api_response=ApiResponseCache(cache, api_ttl),
        )
