"""Unit tests for the single-flight alignment cache."""

from __future__ import annotations

import asyncio

import pytest

from vocasync.alignment.cache import AlignmentCache
from vocasync.errors import TransportError
from vocasync.timestamps.models import AlignmentTrack


class CountingFetcher:
    """Fetcher that records calls and yields control before resolving."""

    def __init__(self, result=None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[str] = []

    async def __call__(self, key: str):
        self.calls.append(key)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.result


def test_first_request_fetches_then_memoizes(make_track) -> None:
    """Only the first request for a key reaches the fetcher."""
    words = make_track("hello", "world")
    fetcher = CountingFetcher(AlignmentTrack(words=words, duration=1.0))
    cache = AlignmentCache(fetcher)

    async def scenario():
        first = await cache.get_track("p1")
        second = await cache.get_track("p1")
        return first, second

    first, second = asyncio.run(scenario())

    assert first == words
    assert second == words
    assert fetcher.calls == ["p1"]
    assert cache.fetch_count == 1
    assert cache.peek("p1") == words
    assert "p1" in cache
    assert len(cache) == 1


def test_concurrent_first_requests_share_one_fetch(make_track) -> None:
    """Simultaneous requests collapse onto a single in-flight fetch."""
    words = make_track("a")
    fetcher = CountingFetcher(words)
    cache = AlignmentCache(fetcher)

    async def scenario():
        return await asyncio.gather(*(cache.get_track("p1") for _ in range(5)))

    results = asyncio.run(scenario())

    assert fetcher.calls == ["p1"]
    assert all(result == words for result in results)


def test_distinct_keys_fetch_independently(make_track) -> None:
    """Each key is fetched once."""
    fetcher = CountingFetcher(make_track("x"))
    cache = AlignmentCache(fetcher)

    async def scenario():
        await asyncio.gather(cache.get_track("a"), cache.get_track("b"), cache.get_track("a"))

    asyncio.run(scenario())

    assert sorted(fetcher.calls) == ["a", "b"]


def test_failed_fetch_is_remembered_as_unavailable() -> None:
    """A failing fetch is not retried within the same cache lifetime."""
    fetcher = CountingFetcher(error=TransportError("gone", status_code=404))
    cache = AlignmentCache(fetcher)

    async def scenario():
        return await cache.get_track("p1"), await cache.get_track("p1")

    first, second = asyncio.run(scenario())

    assert first is None
    assert second is None
    assert fetcher.calls == ["p1"]
    assert "p1" in cache


def test_fetcher_returning_none_is_unavailable() -> None:
    """``None`` from the fetcher is stored like a failure."""
    cache = AlignmentCache(CountingFetcher(None))
    assert asyncio.run(cache.get_track("p1")) is None
    assert "p1" in cache


def test_clear_forgets_values(make_track) -> None:
    """After clearing, the next request fetches again."""
    fetcher = CountingFetcher(make_track("a"))
    cache = AlignmentCache(fetcher)

    async def scenario():
        await cache.get_track("p1")
        cache.clear()
        await cache.get_track("p1")

    asyncio.run(scenario())

    assert fetcher.calls == ["p1", "p1"]


def test_peek_does_not_fetch() -> None:
    """Peeking an unknown key neither fetches nor stores."""
    fetcher = CountingFetcher(None)
    cache = AlignmentCache(fetcher)
    assert cache.peek("nope") is None
    assert "nope" not in cache
    assert fetcher.calls == []


class BlockingFetcher:
    """Fetcher that waits for ``release`` before returning its result."""

    def __init__(self, result) -> None:
        self.result = result
        self.release = asyncio.Event()
        self.calls: list[str] = []

    async def __call__(self, key: str):
        self.calls.append(key)
        await self.release.wait()
        return self.result


def test_clear_during_fetch_joins_running_fetch(make_track) -> None:
    """Requests made after a clear share the fetch that is still running."""
    words = make_track("a")
    fetcher = BlockingFetcher(words)
    cache = AlignmentCache(fetcher)

    async def scenario():
        first = asyncio.create_task(cache.get_track("k"))
        await asyncio.sleep(0)
        cache.clear()
        second = asyncio.create_task(cache.get_track("k"))
        await asyncio.sleep(0)
        fetcher.release.set()
        return await asyncio.gather(first, second)

    first, second = asyncio.run(scenario())

    assert fetcher.calls == ["k"]
    assert cache.fetch_count == 1
    assert first == second == words
    assert "k" in cache


def test_cancelled_waiter_does_not_cancel_shared_fetch(make_track) -> None:
    """Cancelling one waiter leaves the other waiting on the same fetch."""
    words = make_track("a", "b")
    fetcher = BlockingFetcher(words)
    cache = AlignmentCache(fetcher)

    async def scenario():
        doomed = asyncio.create_task(cache.get_track("k"))
        survivor = asyncio.create_task(cache.get_track("k"))
        await asyncio.sleep(0)
        doomed.cancel()
        with pytest.raises(asyncio.CancelledError):
            await doomed
        fetcher.release.set()
        return await survivor

    result = asyncio.run(scenario())

    assert result == words
    assert fetcher.calls == ["k"]
    assert cache.fetch_count == 1
    assert cache.peek("k") == words


def test_unexpected_fetch_error_is_remembered_as_unavailable() -> None:
    """Any fetcher exception resolves to ``None`` and is not retried."""
    fetcher = CountingFetcher(error=ValueError("bad alignment payload"))
    cache = AlignmentCache(fetcher)

    async def scenario():
        return await cache.get_track("p1"), await cache.get_track("p1")

    first, second = asyncio.run(scenario())

    assert first is None
    assert second is None
    assert fetcher.calls == ["p1"]
    assert cache.fetch_count == 1
    assert "p1" in cache
