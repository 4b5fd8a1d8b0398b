"""TTL cache used for upstream enumerations"""
from app.core.cache import TTLCache
from tests.helpers import FakeClock


def test_miss_on_empty_cache():
    cache = TTLCache(120, clock=FakeClock())
    assert cache.get("all") is None


def test_hit_within_ttl_returns_same_object():
    clock = FakeClock()
    cache = TTLCache(120, clock=clock)
    value = [1, 2, 3]
    cache.set("all", value)
    clock.advance(119)
    assert cache.get("all") is value


def test_entry_expires_at_ttl():
    clock = FakeClock()
    cache = TTLCache(120, clock=clock)
    cache.set("all", [1])
    clock.advance(120)
    assert cache.get("all") is None


def test_set_replaces_entry_and_resets_age():
    clock = FakeClock()
    cache = TTLCache(120, clock=clock)
    cache.set("all", [1])
    clock.advance(100)
    cache.set("all", [2])
    clock.advance(100)
    assert cache.get("all") == [2]


def test_keys_are_independent():
    cache = TTLCache(120, clock=FakeClock())
    cache.set("all", ["a"])
    cache.set("1710009000", ["b"])
    assert cache.get("all") == ["a"]
    assert cache.get("1710009000") == ["b"]


def test_clear_drops_fresh_entries():
    cache = TTLCache(120, clock=FakeClock())
    cache.set("all", [1])
    cache.set("other", [2])
    cache.clear()
    assert len(cache) == 0
    assert cache.get("all") is None


def test_expired_entry_evicted_on_read():
    clock = FakeClock()
    cache = TTLCache(120, clock=clock)
    cache.set("all", [1])
    clock.advance(120)
    assert cache.get("all") is None
    assert len(cache) == 0


def test_daily_keys_do_not_accumulate():
    """A new start-of-day key every day leaves only the current one behind"""
    clock = FakeClock()
    cache = TTLCache(120, clock=clock)
    day_start = 1710009000
    for day in range(30):
        cache.set(str(day_start + day * 86400), [day])
        clock.advance(86400)
    assert len(cache) == 1
    cache.set("all", [])
    assert len(cache) == 1


def test_set_keeps_fresh_entries():
    clock = FakeClock()
    cache = TTLCache(120, clock=clock)
    cache.set("a", [1])
    clock.advance(60)
    cache.set("b", [2])
    assert len(cache) == 2
    assert cache.get("a") == [1]
