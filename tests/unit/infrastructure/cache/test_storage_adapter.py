import json
import math

import pytest
from unittest.mock import MagicMock

from localhub_cache.domain.interfaces.storage import StorageError, StorageMedium, StorageQuotaExceededError
from localhub_cache.infrastructure.cache.storage_adapter import TieredStorageAdapter
from localhub_cache.infrastructure.storage.memory_medium import MemoryMedium, UnavailableMedium

@pytest.fixture
def medium():
    return MemoryMedium()

@pytest.fixture
def adapter(medium, clock):
    return TieredStorageAdapter(medium, "cache_", default_ttl=None, name="session", clock=clock)

def test_set_writes_versioned_envelope(adapter: TieredStorageAdapter, medium: MemoryMedium, clock):
    assert adapter.set("user:42", {"name": "Ann"}, ttl=30) is True

    record = json.loads(medium.get_item("cache_user:42"))
    now_ms = int(clock() * 1000)
    assert record == {
        "version": 1,
        "value": {"name": "Ann"},
        "expiry": now_ms + 30_000,
        "timestamp": now_ms,
    }

def test_round_trip_json_values(adapter: TieredStorageAdapter):
    marker = object()
    value = {"list": [1, 2.5, "three", None, True], "nested": {"empty": {}}}
    adapter.set("k", value)
    adapter.set("null", None)

    assert adapter.get("k") == value
    assert adapter.get("null", marker) is None
    assert adapter.get("absent", marker) is marker

def test_no_ttl_stores_null_expiry(adapter: TieredStorageAdapter, medium: MemoryMedium, clock):
    adapter.set("static:categories", ["food"])
    clock.advance(10 ** 8)

    assert json.loads(medium.get_item("cache_static:categories"))["expiry"] is None
    assert adapter.get("static:categories") == ["food"]

def test_expired_record_is_removed_on_get(adapter: TieredStorageAdapter, medium: MemoryMedium, clock):
    adapter.set("x", 1, ttl=0.1)
    clock.advance(0.15)

    assert adapter.get("x") is None
    assert medium.get_item("cache_x") is None

@pytest.mark.parametrize("raw", [
    "not json",
    json.dumps([1, 2, 3]),
    json.dumps({"value": 1, "expiry": None, "timestamp": 1}),
    json.dumps({"version": 99, "value": 1, "expiry": None, "timestamp": 1}),
    json.dumps({"version": 1, "value": 1, "expiry": "soon", "timestamp": 1}),
    '{"version": 1, "value": 1, "expiry": 1e400, "timestamp": 1}',
    json.dumps({"version": 1, "value": 1, "expiry": None, "timestamp": float("nan")}),
    json.dumps({"version": 1, "value": 1, "expiry": True, "timestamp": 1}),
])
def test_corrupt_record_is_removed(adapter: TieredStorageAdapter, medium: MemoryMedium, raw: str):
    medium.set_item("cache_bad", raw)

    assert adapter.get("bad") is None
    assert medium.get_item("cache_bad") is None

@pytest.mark.parametrize("ttl", [math.inf, math.nan])
def test_non_finite_ttl_drops_write(adapter: TieredStorageAdapter, medium: MemoryMedium, ttl):
    assert adapter.set("k", 1, ttl=ttl) is False
    assert medium.keys() == []

def test_get_entry_reports_remaining_ttl(adapter: TieredStorageAdapter, clock):
    adapter.set("short", 1, ttl=30)
    adapter.set("forever", 2)
    clock.advance(10)

    assert adapter.remaining_ttl(adapter.get_entry("short")) == pytest.approx(20)
    assert adapter.remaining_ttl(adapter.get_entry("forever")) is None
    assert adapter.get_entry("absent") is None

def test_unserializable_value_returns_false(adapter: TieredStorageAdapter, medium: MemoryMedium):
    cyclic = []
    cyclic.append(cyclic)

    assert adapter.set("cyclic", cyclic) is False
    assert adapter.set("object", object()) is False
    assert medium.keys() == []

def test_unavailable_medium_degrades_to_miss(clock):
    adapter = TieredStorageAdapter(UnavailableMedium(), "cache_", clock=clock)

    assert adapter.set("k", 1) is False
    assert adapter.get("k", "default") == "default"
    adapter.remove("k")
    adapter.clear()
    assert adapter.stats() == {"name": "storage", "available": False, "entries": 0, "usage_bytes": None}

def test_medium_errors_are_swallowed(clock):
    medium = MagicMock(spec=StorageMedium)
    medium.available = True
    medium.get_item.side_effect = StorageError("disk gone")
    medium.set_item.side_effect = StorageError("disk gone")
    medium.remove_item.side_effect = StorageError("disk gone")
    medium.keys.side_effect = StorageError("disk gone")
    adapter = TieredStorageAdapter(medium, "cache_", clock=clock)

    assert adapter.get("k") is None
    assert adapter.set("k", 1) is False
    adapter.remove("k")
    adapter.clear()
    assert adapter.clean_expired() == 0

def test_quota_exceeded_sweeps_then_retries(clock):
    medium = MemoryMedium(size_limit_bytes=200)
    adapter = TieredStorageAdapter(medium, "cache_", clock=clock)
    assert adapter.set("old", "x" * 60, ttl=1) is True
    clock.advance(2)

    assert adapter.set("new", "y" * 100) is True
    assert medium.get_item("cache_old") is None
    assert adapter.get("new") == "y" * 100

def test_quota_exceeded_without_expired_entries_drops_write(clock):
    medium = MemoryMedium(size_limit_bytes=100)
    adapter = TieredStorageAdapter(medium, "cache_", clock=clock)

    assert adapter.set("big", "z" * 200) is False
    assert adapter.get("big") is None

def test_clear_and_count_only_touch_own_prefix(medium: MemoryMedium, clock):
    session = TieredStorageAdapter(medium, "cache_session_", clock=clock)
    medium.set_item("unrelated", "keep me")
    session.set("a", 1)
    session.set("b", 2)

    assert session.count() == 2
    assert sorted(session.keys()) == ["a", "b"]

    session.clear()

    assert session.count() == 0
    assert medium.get_item("unrelated") == "keep me"

def test_clean_expired_removes_expired_and_corrupt(adapter: TieredStorageAdapter, medium: MemoryMedium, clock):
    adapter.set("short", 1, ttl=1)
    adapter.set("long", 2, ttl=100)
    medium.set_item("cache_garbage", "{")
    clock.advance(5)

    assert adapter.clean_expired() == 2
    assert adapter.keys() == ["long"]

def test_clean_expired_is_not_stopped_by_out_of_range_record(adapter: TieredStorageAdapter, medium: MemoryMedium, clock):
    adapter.set("short", 1, ttl=1)
    medium.set_item("cache_huge", '{"version": 1, "value": 1, "expiry": 1e400, "timestamp": 1}')
    clock.advance(5)

    assert adapter.clean_expired() == 2
    assert adapter.keys() == []

def test_invalidate_pattern(adapter: TieredStorageAdapter):
    adapter.set("search:pizza:nyc", [1])
    adapter.set("search:pizza:la", [2])
    adapter.set("user:1", {})

    assert adapter.invalidate_pattern("search:pizza:*") == 2
    assert adapter.keys() == ["user:1"]

def test_set_quota_error_type_is_storage_error():
    assert issubclass(StorageQuotaExceededError, StorageError)
