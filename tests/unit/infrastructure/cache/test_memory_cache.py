import pytest

from localhub_cache.domain.models.entry import DEFAULT_ENTRY_SIZE_BYTES
from localhub_cache.infrastructure.cache.memory_cache import BoundedRecencyCache

@pytest.fixture
def cache(clock):
    return BoundedRecencyCache(max_size=3, clock=clock)

def test_get_refresh_protects_oldest_from_eviction(cache: BoundedRecencyCache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert cache.get("a") == 1
    cache.set("d", 4)

    assert sorted(cache.keys()) == ["a", "c", "d"]
    assert cache.get("b") is None

def test_capacity_evicts_exactly_least_recent(cache: BoundedRecencyCache):
    for i in range(5):
        cache.set(f"k{i}", i)

    assert len(cache) == 3
    assert cache.keys() == ["k2", "k3", "k4"]

def test_overwrite_existing_key_does_not_evict(cache: BoundedRecencyCache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    cache.set("a", 10)

    assert len(cache) == 3
    assert cache.get("a") == 10
    # 'a' is now most recent, so 'b' goes next
    cache.set("d", 4)
    assert "b" not in cache

def test_ttl_expiry_is_lazy(cache: BoundedRecencyCache, clock):
    cache.set("x", "value", ttl=0.1)

    clock.advance(0.1)
    assert cache.get("x") == "value"

    clock.advance(0.05)
    assert cache.stats()["expired_but_not_yet_evicted"] == 1
    assert len(cache) == 1

    assert cache.get("x") is None
    assert len(cache) == 0

def test_overwrite_resets_ttl(cache: BoundedRecencyCache, clock):
    cache.set("x", 1, ttl=10)
    clock.advance(8)
    cache.set("x", 2, ttl=10)
    clock.advance(8)

    assert cache.get("x") == 2

def test_default_ttl_none_never_expires(clock):
    cache = BoundedRecencyCache(max_size=2, clock=clock)
    cache.set("forever", True)
    clock.advance(10 ** 9)

    assert cache.get("forever") is True

def test_default_ttl_applies_when_ttl_omitted(clock):
    cache = BoundedRecencyCache(max_size=2, default_ttl=60, clock=clock)
    cache.set("k", "v")
    clock.advance(61)

    assert cache.get("k") is None

def test_get_default_distinguishes_stored_none(cache: BoundedRecencyCache):
    marker = object()
    cache.set("nothing", None)

    assert cache.get("nothing", marker) is None
    assert cache.get("missing", marker) is marker

def test_delete_and_clear(cache: BoundedRecencyCache):
    cache.set("a", 1)
    cache.delete("a")
    cache.delete("never-there")
    assert cache.get("a") is None

    cache.set("b", 2)
    cache.get("b")
    cache.clear()

    stats = cache.stats()
    assert stats["size"] == 0
    assert stats["hits"] == 0
    assert stats["misses"] == 0

def test_stats_counts_hits_and_sizes(cache: BoundedRecencyCache):
    cache.set("a", {"name": "Ann"})
    cache.get("a")
    cache.get("a")
    cache.get("missing")

    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["max_size"] == 3
    assert stats["hits"] == 2
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 66.67
    assert stats["total_approx_size_bytes"] == len('{"name": "Ann"}')

def test_cyclic_value_uses_default_size(cache: BoundedRecencyCache):
    cyclic = {}
    cyclic["self"] = cyclic

    cache.set("loop", cyclic)

    assert cache.get("loop") is cyclic
    assert cache.stats()["total_approx_size_bytes"] == DEFAULT_ENTRY_SIZE_BYTES

def test_keys_are_case_sensitive(cache: BoundedRecencyCache):
    cache.set("Key", 1)

    assert cache.get("key") is None
    assert cache.get("Key") == 1

def test_non_string_key_raises(cache: BoundedRecencyCache):
    with pytest.raises(TypeError):
        cache.set(42, "value")
    with pytest.raises(TypeError):
        cache.get(None)

def test_invalidate_pattern_and_cleanup(clock):
    cache = BoundedRecencyCache(max_size=10, clock=clock)
    cache.set("search:pizza:nyc", [1])
    cache.set("search:tacos:la", [2])
    cache.set("user:1", {"id": 1}, ttl=5)

    assert cache.invalidate_pattern("search:*") == 2
    assert cache.keys() == ["user:1"]

    clock.advance(6)
    assert cache.cleanup() == 1
    assert len(cache) == 0

def test_entries_reports_metadata(cache: BoundedRecencyCache, clock):
    cache.set("a", 1, ttl=10)
    cache.set("b", 2, ttl=1)
    clock.advance(2)

    live = cache.entries()
    assert [e["key"] for e in live] == ["a"]
    assert live[0]["ttl_remaining"] == 8

    everything = cache.entries(include_expired=True)
    assert {e["key"]: e["is_expired"] for e in everything} == {"a": False, "b": True}

def test_has_does_not_touch_recency(cache: BoundedRecencyCache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert cache.has("a")
    cache.set("d", 4)

    assert not cache.has("a")
    assert cache.stats()["hits"] == 0

def test_invalid_max_size():
    with pytest.raises(ValueError):
        BoundedRecencyCache(max_size=0)
