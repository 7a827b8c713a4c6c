import pytest

from app.cache import TTLCache


@pytest.mark.asyncio
async def test_entries_expire(monkeypatch):
    now = {"t": 1000.0}
    monkeypatch.setattr("app.cache.time.time", lambda: now["t"])
    cache = TTLCache(default_ttl=10)

    await cache.set("top_traders:10", ["a"])
    assert await cache.get("top_traders:10") == ["a"]

    now["t"] += 11
    assert await cache.get("top_traders:10") is None
    assert cache.size() == 0


@pytest.mark.asyncio
async def test_least_recently_used_is_evicted():
    cache = TTLCache(default_ttl=60, max_size=2)

    await cache.set("a", 1)
    await cache.set("b", 2)
    await cache.get("a")
    await cache.set("c", 3)

    assert await cache.get("b") is None
    assert await cache.get("a") == 1
    assert await cache.get("c") == 3
