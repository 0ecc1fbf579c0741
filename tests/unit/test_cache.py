import asyncio

import pytest

from update_steward.cache import SharedLookups, VersionListCache

REFINED = ("eu.timepit", "refined")
CATS = ("org.typelevel", "cats-core")
FS2 = ("co.fs2", "fs2-core")


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self._t = start

    def now(self) -> float:
        return self._t

    def advance(self, dt: float) -> None:
        self._t += dt


async def test_lookup_before_and_after_expiry() -> None:
    clock = FakeClock()
    cache = VersionListCache(ttl_seconds=5, capacity=10, clock=clock.now)

    await cache.store(REFINED, ["0.8.5", "0.9.0"])
    assert await cache.lookup(REFINED) == ["0.8.5", "0.9.0"]
    clock.advance(5.0001)
    assert await cache.lookup(REFINED) is None
    assert len(cache) == 0


async def test_lookup_returns_a_copy() -> None:
    cache = VersionListCache(ttl_seconds=60, capacity=10)
    await cache.store(REFINED, ["0.9.0"])
    (await cache.lookup(REFINED)).append("junk")
    assert await cache.lookup(REFINED) == ["0.9.0"]


async def test_oldest_coordinates_evicted_first() -> None:
    cache = VersionListCache(ttl_seconds=60, capacity=2)

    await cache.store(REFINED, ["1"])
    await cache.store(CATS, ["2"])
    await cache.store(REFINED, ["3"])  # re-storing moves it to the back
    await cache.store(FS2, ["4"])

    assert await cache.lookup(CATS) is None
    assert await cache.lookup(REFINED) == ["3"]
    assert await cache.lookup(FS2) == ["4"]


async def test_clear() -> None:
    cache = VersionListCache(ttl_seconds=60, capacity=2)
    await cache.store(REFINED, ["1"])
    await cache.clear()
    assert await cache.lookup(REFINED) is None


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        VersionListCache(ttl_seconds=-1, capacity=1)
    with pytest.raises(ValueError):
        VersionListCache(ttl_seconds=1, capacity=0)


async def test_concurrent_lookups_share_one_fetch() -> None:
    lookups = SharedLookups()
    started = asyncio.Event()
    proceed = asyncio.Event()
    calls = 0

    async def fetch() -> list[str]:
        nonlocal calls
        calls += 1
        started.set()
        await proceed.wait()
        return ["0.9.0"]

    tasks = [asyncio.create_task(lookups.join(REFINED, fetch)) for _ in range(5)]
    await started.wait()
    assert lookups.is_running(REFINED)
    assert not lookups.is_running(CATS)
    proceed.set()

    assert await asyncio.gather(*tasks) == [["0.9.0"]] * 5
    assert calls == 1
    assert not lookups.is_running(REFINED)


async def test_failed_fetch_propagates_and_is_forgotten() -> None:
    lookups = SharedLookups()

    async def fetch() -> list[str]:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await lookups.join(REFINED, fetch)
    assert not lookups.is_running(REFINED)
