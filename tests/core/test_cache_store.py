"""Tests for TTLCacheStore freshness, get-or-fetch and fetch coalescing."""

import asyncio

import pytest

from ghedit.core.cache.store import TTLCacheStore
from ghedit.core.errors import FetchError
from ghedit.core.time.fake import FakeTime


def test_write_is_valid_immediately_and_expires_after_ttl() -> None:
    """A fresh write is valid for any positive TTL and expires once TTL passes."""
    time = FakeTime()
    cache = TTLCacheStore(time=time)

    cache.write("issues_current_open", ["payload"])

    assert cache.is_valid("issues_current_open", 1)
    assert cache.is_valid("issues_current_open", 300)

    time.advance(300)
    assert not cache.is_valid("issues_current_open", 300)
    assert cache.is_valid("issues_current_open", 301)


def test_ttl_scenario_with_fake_clock() -> None:
    """Entry written at t=0 is fresh at t=100 and stale at t=400 for TTL 300."""
    time = FakeTime()
    cache = TTLCacheStore(time=time)
    payload = [{"number": 1, "title": "A"}]

    cache.write("issues_myrepo_open", payload)

    time.advance(100)
    assert cache.is_valid("issues_myrepo_open", 300)
    assert cache.read("issues_myrepo_open") is payload

    time.advance(300)
    assert not cache.is_valid("issues_myrepo_open", 300)
    # read() ignores freshness
    assert cache.read("issues_myrepo_open") is payload


def test_read_and_is_valid_for_missing_key() -> None:
    cache = TTLCacheStore(time=FakeTime())

    assert cache.read("missing") is None
    assert not cache.is_valid("missing", 300)


def test_zero_ttl_is_never_valid() -> None:
    cache = TTLCacheStore(time=FakeTime())
    cache.write("k", 1)

    assert not cache.is_valid("k", 0)


def test_write_overwrites_and_resets_timestamp() -> None:
    time = FakeTime()
    cache = TTLCacheStore(time=time)
    cache.write("k", "old")
    time.advance(250)

    cache.write("k", "new")
    time.advance(100)

    assert cache.read("k") == "new"
    assert cache.is_valid("k", 300)


def test_clear_is_idempotent() -> None:
    cache = TTLCacheStore(time=FakeTime())
    cache.write("k", 1)

    cache.clear("k")
    cache.clear("k")

    assert cache.read("k") is None


def test_clear_prefix_removes_only_matching_keys() -> None:
    cache = TTLCacheStore(time=FakeTime())
    cache.write("issues_owner_repo_open", 1)
    cache.write("issues_owner_repo_closed", 2)
    cache.write("issues_other_repo_open", 3)

    removed = cache.clear_prefix("issues_owner_repo_")

    assert sorted(removed) == ["issues_owner_repo_closed", "issues_owner_repo_open"]
    assert cache.stats().keys == ["issues_other_repo_open"]


def test_clear_all_and_stats() -> None:
    cache = TTLCacheStore(time=FakeTime())
    cache.write("b", 1)
    cache.write("a", 2)

    stats = cache.stats()
    assert stats.entry_count == 2
    assert stats.keys == ["a", "b"]
    assert stats.in_flight == []

    cache.clear_all()
    assert cache.stats().entry_count == 0


async def test_get_or_fetch_does_not_call_fetch_when_valid() -> None:
    """A valid entry short-circuits get_or_fetch."""
    time = FakeTime()
    cache = TTLCacheStore(time=time)
    cache.write("k", "cached")
    time.advance(100)
    calls: list[str] = []

    async def fetch() -> str:
        calls.append("fetch")
        return "fresh"

    result = await cache.get_or_fetch("k", fetch, 300)

    assert result == "cached"
    assert calls == []


async def test_get_or_fetch_fetches_and_writes_when_stale() -> None:
    time = FakeTime()
    cache = TTLCacheStore(time=time)
    cache.write("k", "cached")
    time.advance(400)

    async def fetch() -> str:
        return "fresh"

    result = await cache.get_or_fetch("k", fetch, 300)

    assert result == "fresh"
    assert cache.read("k") == "fresh"
    assert cache.is_valid("k", 300)


async def test_failed_fetch_leaves_stale_entry_untouched() -> None:
    """A failed refresh neither writes nor removes the existing entry."""
    time = FakeTime()
    cache = TTLCacheStore(time=time)
    cache.write("k", "stale")
    time.advance(400)

    async def fetch() -> str:
        raise FetchError("gh: HTTP 502")

    with pytest.raises(FetchError, match="HTTP 502"):
        await cache.get_or_fetch("k", fetch, 300)

    assert cache.read("k") == "stale"
    assert not cache.is_valid("k", 300)


async def test_failed_fetch_for_absent_key_writes_nothing() -> None:
    cache = TTLCacheStore(time=FakeTime())

    async def fetch() -> str:
        raise FetchError("not found")

    with pytest.raises(FetchError):
        await cache.get_or_fetch("k", fetch, 300)

    assert cache.read("k") is None
    assert cache.stats().entry_count == 0


async def test_concurrent_calls_share_one_fetch() -> None:
    """Calls for the same key made while a fetch runs join that fetch."""
    cache = TTLCacheStore(time=FakeTime())
    gate = asyncio.Event()
    calls: list[int] = []

    async def fetch() -> list[str]:
        calls.append(1)
        await gate.wait()
        return ["payload"]

    first = asyncio.ensure_future(cache.get_or_fetch("k", fetch, 300))
    second = asyncio.ensure_future(cache.get_or_fetch("k", fetch, 300))
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert cache.stats().in_flight == ["k"]
    gate.set()

    assert await first == ["payload"]
    assert await second == ["payload"]
    assert calls == [1]
    assert cache.stats().in_flight == []


async def test_concurrent_calls_for_different_keys_fetch_separately() -> None:
    cache = TTLCacheStore(time=FakeTime())
    calls: list[str] = []

    def fetcher(key: str):
        async def fetch() -> str:
            calls.append(key)
            await asyncio.sleep(0)
            return key.upper()

        return fetch

    results = await asyncio.gather(
        cache.get_or_fetch("a", fetcher("a"), 300),
        cache.get_or_fetch("b", fetcher("b"), 300),
    )

    assert results == ["A", "B"]
    assert sorted(calls) == ["a", "b"]


async def test_failed_shared_fetch_does_not_poison_later_calls() -> None:
    """After a shared fetch fails, the next call starts a new fetch."""
    cache = TTLCacheStore(time=FakeTime())
    attempts: list[int] = []

    async def flaky() -> str:
        attempts.append(1)
        await asyncio.sleep(0)
        if len(attempts) == 1:
            raise FetchError("rate limited")
        return "ok"

    first = asyncio.ensure_future(cache.get_or_fetch("k", flaky, 300))
    second = asyncio.ensure_future(cache.get_or_fetch("k", flaky, 300))
    results = await asyncio.gather(first, second, return_exceptions=True)

    assert all(isinstance(result, FetchError) for result in results)
    assert attempts == [1]
    assert cache.stats().in_flight == []

    assert await cache.get_or_fetch("k", flaky, 300) == "ok"
    assert len(attempts) == 2
