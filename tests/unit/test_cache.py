import asyncio

import pytest

from personhints.orchestration.cache import MemoCache, make_key, memoize


class Opaque:
    pass


@pytest.mark.asyncio
async def test_repeated_calls_hit_the_cache():
    calls = []

    def tokenize(text):
        calls.append(text)
        return tuple(text.split())

    cached = memoize(tokenize)

    assert await cached("Felix Ruiz") == ("Felix", "Ruiz")
    assert await cached("Felix Ruiz") == ("Felix", "Ruiz")
    assert await cached("Marie") == ("Marie",)
    assert calls == ["Felix Ruiz", "Marie"]
    assert cached.cache.hits == 1
    assert cached.cache.misses == 2


@pytest.mark.asyncio
async def test_async_functions_are_awaited_once():
    calls = 0

    async def lookup(class_type, range_uri):
        nonlocal calls
        calls += 1
        await asyncio.sleep(0)
        return [f"{class_type}->{range_uri}"]

    cached = memoize(lookup)

    assert await cached("Zitting", "Person") == ["Zitting->Person"]
    assert await cached("Zitting", "Person") == ["Zitting->Person"]
    assert calls == 1


@pytest.mark.asyncio
async def test_concurrent_identical_calls_share_one_invocation():
    calls = 0

    async def slow(value):
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return value * 2

    cached = memoize(slow)
    results = await asyncio.gather(*(cached(21) for _ in range(4)))

    assert results == [42, 42, 42, 42]
    assert calls == 1


@pytest.mark.asyncio
async def test_failures_are_not_cached():
    attempts = 0

    async def flaky(value):
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("boom")
        return value

    cached = memoize(flaky)

    with pytest.raises(RuntimeError):
        await cached("x")
    assert await cached("x") == "x"
    assert attempts == 2


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_shared_computation():
    started = asyncio.Event()

    async def slow(value):
        started.set()
        await asyncio.sleep(0.01)
        return value

    cached = memoize(slow)
    first = asyncio.create_task(cached("a"))
    await started.wait()
    second = asyncio.create_task(cached("a"))
    await asyncio.sleep(0)
    first.cancel()

    assert await second == "a"
    assert first.cancelled()


@pytest.mark.asyncio
async def test_separate_caches_are_independent():
    calls = 0

    def compute(value):
        nonlocal calls
        calls += 1
        return value

    await memoize(compute, cache=MemoCache())("a")
    await memoize(compute, cache=MemoCache())("a")

    assert calls == 2


@pytest.mark.asyncio
async def test_custom_key_function():
    calls = 0

    def match(snapshot, prefix):
        nonlocal calls
        calls += 1
        return prefix.lower()

    cached = memoize(match, key=lambda snapshot, prefix: (snapshot["version"], prefix.lower()))

    await cached({"version": 1}, "Felix")
    await cached({"version": 1}, "FELIX")
    await cached({"version": 2}, "felix")

    assert calls == 2


def test_keys_compare_values_for_primitives_and_identity_for_objects():
    first, second = Opaque(), Opaque()

    assert make_key("Felix", 3) == make_key("Felix", 3)
    assert make_key(1) != make_key(True)
    assert make_key(first) == make_key(first)
    assert make_key(first) != make_key(second)
    assert make_key(text="a", size=2) == make_key(size=2, text="a")


def test_cache_store_operations():
    cache = MemoCache()
    cache.set("k", 1)

    assert "k" in cache
    assert cache.get("k") == 1
    assert len(cache) == 1

    cache.delete("k")
    assert cache.get("k", "missing") == "missing"

    cache.set("k", 2)
    cache.clear()
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_distinct_callables_sharing_a_cache_do_not_collide():
    shared = MemoCache()
    inc = memoize(lambda value: value + 1, cache=shared)
    dbl = memoize(lambda value: value * 2, cache=shared)

    assert await inc(10) == 11
    assert await dbl(10) == 20
    assert len(shared) == 2
