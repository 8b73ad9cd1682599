from src.app_shell.cache import TTLCache, board_key, leaderboard_key
from tests.helpers import FixedClock


def _cache(ttl: int = 10):
    clock = FixedClock()
    return TTLCache(default_ttl=ttl, time_port=clock), clock


def test_get_set_and_expiry():
    cache, clock = _cache()
    cache.set("a", [1, 2])
    assert cache.get("a") == [1, 2]
    clock.advance(10)
    assert cache.get("a") is None


def test_per_entry_ttl():
    cache, clock = _cache(ttl=10)
    cache.set("long", 1, ttl=300)
    cache.set("short", 2)
    clock.advance(60)
    assert cache.get("long") == 1
    assert cache.get("short") is None


def test_zero_ttl_is_not_stored():
    cache, _ = _cache()
    cache.set("a", 1, ttl=0)
    assert cache.get("a") is None


def test_invalidate_exact_key():
    cache, _ = _cache()
    cache.set("a", 1)
    assert cache.invalidate("a") == 1
    assert cache.invalidate("a") == 0


def test_invalidate_pattern():
    cache, _ = _cache()
    cache.set(leaderboard_key("global"), [])
    cache.set(leaderboard_key("room", "AB1 101"), [])
    cache.set(board_key("t1"), {})

    assert cache.invalidate("leaderboard:*") == 2
    assert cache.get(board_key("t1")) == {}


def test_stats():
    cache, _ = _cache()
    cache.set("a", 1)
    cache.get("a")
    cache.get("missing")
    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.keys) == (1, 1, 1)

    cache.clear()
    assert cache.stats().keys == 0


def test_key_helpers():
    assert leaderboard_key("top", 10) == "leaderboard:top:10"
    assert board_key("abc") == "board:abc"
