import pytest

from proplens.container import build_container
from proplens.services import ResponseCache


class Clock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_hit_within_ttl():
    clock = Clock()
    cache = ResponseCache(ttl_seconds=900, clock=clock)
    cache.set("k", [1, 2])

    clock.now += 899
    assert cache.get("k") == [1, 2]


def test_stale_entry_is_dropped():
    clock = Clock()
    cache = ResponseCache(ttl_seconds=900, clock=clock)
    cache.set("k", "value")

    clock.now += 901
    assert cache.get("k") is None
    assert len(cache) == 0


def test_set_overwrites_and_restarts_ttl():
    clock = Clock()
    cache = ResponseCache(ttl_seconds=10, clock=clock)
    cache.set("k", "old")
    clock.now += 8
    cache.set("k", "new")
    clock.now += 8

    assert cache.get("k") == "new"


def test_disabled_cache_never_stores():
    cache = ResponseCache(enabled=False)
    cache.set("k", "value")

    assert cache.get("k") is None
    assert len(cache) == 0


def test_clear():
    cache = ResponseCache()
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()

    assert cache.get("a") is None
    assert len(cache) == 0


@pytest.mark.anyio
async def test_container_keeps_injected_cache(keyed_settings, db):
    cache = ResponseCache(enabled=False)
    container = build_container(keyed_settings, db=db, sources=[], cache=cache)

    await container.data_service.fetch_market_trends(region="Austin")

    assert container.cache is cache
    assert container.data_service.cache is cache
    assert len(cache) == 0
