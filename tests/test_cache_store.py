import pytest

from xmlstats_events.cache_store import ResponseCache


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_get_returns_value_within_ttl() -> None:
    clock = FakeClock()
    cache = ResponseCache(clock=clock)
    cache.set("k", {"events_date": "20150317"})

    clock.advance(599.9)

    assert cache.get("k") == {"events_date": "20150317"}


def test_get_after_ttl_is_absent() -> None:
    clock = FakeClock()
    cache = ResponseCache(clock=clock)
    cache.set("k", {"a": 1})

    clock.advance(600.0)

    assert cache.get("k") is None
    assert len(cache) == 0


def test_set_overwrite_resets_age() -> None:
    clock = FakeClock()
    cache = ResponseCache(ttl_s=10, clock=clock)
    cache.set("k", "old")
    clock.advance(8)
    cache.set("k", "new")
    clock.advance(8)

    assert cache.get("k") == "new"


def test_expired_entries_stay_until_touched_or_purged() -> None:
    clock = FakeClock()
    cache = ResponseCache(ttl_s=10, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    clock.advance(5)
    cache.set("c", 3)
    clock.advance(6)

    assert len(cache) == 3
    assert "a" not in cache
    assert "c" in cache
    assert cache.purge_expired() == 2
    assert len(cache) == 1


def test_stats_count_hits_and_misses() -> None:
    cache = ResponseCache(clock=FakeClock())
    cache.set("k", 1)
    cache.get("k")
    cache.get("k")
    cache.get("missing")

    stats = cache.stats()

    assert (stats.hits, stats.misses, stats.keys) == (2, 1, 1)


def test_delete_and_clear() -> None:
    cache = ResponseCache(clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)

    assert cache.delete("a") is True
    assert cache.delete("a") is False
    cache.clear()
    assert len(cache) == 0
    assert cache.stats().misses == 0


def test_rejects_non_positive_ttl() -> None:
    with pytest.raises(ValueError):
        ResponseCache(ttl_s=0)
