"""Tests for the in-process TTL cache."""

from __future__ import annotations

from app.infrastructure.cache import CacheService


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_set_get_and_expiry():
    clock = FakeClock()
    cache = CacheService(default_ttl=10, clock=clock)

    cache.set("a", 1)
    assert cache.get("a") == 1
    assert cache.has("a")

    clock.now += 10
    assert cache.get("a", "gone") == "gone"
    assert not cache.has("a")


def test_custom_ttl_overrides_default():
    clock = FakeClock()
    cache = CacheService(default_ttl=10, clock=clock)

    cache.set("short", "x", ttl=1)
    cache.set("long", "y")
    clock.now += 5

    assert cache.keys() == ["long"]


def test_get_or_set_calls_factory_once():
    cache = CacheService()
    calls = []

    def factory():
        calls.append(1)
        return ["budget"]

    assert cache.get_or_set("k", factory) == ["budget"]
    assert cache.get_or_set("k", factory) == ["budget"]
    assert len(calls) == 1
    assert cache.stats() == {"hits": 1, "misses": 1, "keys": 1}


def test_invalidate_by_prefix_only_touches_matching_keys():
    cache = CacheService()
    cache.set("family:1:budgets", [])
    cache.set("family:1:expenses:*", [])
    cache.set("family:12:budgets", [])

    removed = cache.invalidate_by_prefix("family:1:")

    assert removed == 2
    assert cache.keys() == ["family:12:budgets"]


def test_delete_and_flush():
    cache = CacheService()
    cache.set("a", 1)
    cache.set("b", 2)

    assert cache.delete("a") is True
    assert cache.delete("a") is False

    cache.flush()
    assert cache.keys() == []


def test_get_or_set_does_not_store_a_result_invalidated_mid_computation():
    cache = CacheService()
    rows = ["old"]

    def factory():
        snapshot = list(rows)
        rows.append("new")
        cache.invalidate_by_prefix("family:1:")
        return snapshot

    assert cache.get_or_set("family:1:budgets", factory) == ["old"]
    assert not cache.has("family:1:budgets")
    assert cache.get_or_set("family:1:budgets", lambda: list(rows)) == ["old", "new"]
    assert cache.get("family:1:budgets") == ["old", "new"]
