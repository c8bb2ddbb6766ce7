"""Process-local memoization of alignment track fetches.

One cache instance is constructed per run and passed to every consumer. The
first request for a key performs the remote fetch; concurrent first requests
share that single fetch, and later requests are served from memory. Failed
fetches are remembered as "not available" so a doomed fetch is not repeated
within the same run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from vocasync.errors import MalformedResponseError, TransportError
from vocasync.timestamps.models import AlignedWord, AlignmentTrack

logger = logging.getLogger(__name__)

__all__ = ["AlignmentCache", "TrackFetcher"]

TrackFetcher = Callable[[str], Awaitable[AlignmentTrack | list[AlignedWord] | None]]

_MISSING = object()


class AlignmentCache:
    """Single-flight, per-key cache of alignment tracks.

    Attributes:
        fetch_count: Number of underlying fetches started so far.

    Examples:
        >>> cache = AlignmentCache(client.fetch_alignment_for)
        >>> words = await cache.get_track(project_uuid)
    """

    def __init__(self, fetcher: TrackFetcher) -> None:
        self._fetcher = fetcher
        self._resolved: dict[str, list[AlignedWord] | None] = {}
        self._inflight: dict[str, asyncio.Task[list[AlignedWord] | None]] = {}
        self.fetch_count = 0

    def __contains__(self, key: object) -> bool:
        return key in self._resolved

    def __len__(self) -> int:
        return len(self._resolved)

    def peek(self, key: str) -> list[AlignedWord] | None:
        """Return the stored value for ``key`` without fetching.

        Returns ``None`` both for unknown keys and for keys whose fetch
        failed; use ``key in cache`` to tell them apart.
        """
        return self._resolved.get(key)

    def clear(self) -> None:
        """Forget every stored value.

        In-flight fetches are kept: a request arriving after the clear joins
        the running fetch instead of starting a second one, and its result is
        stored when it completes.
        """
        self._resolved.clear()

    async def _resolve(self, key: str) -> list[AlignedWord] | None:
        self.fetch_count += 1
        try:
            result = await self._fetcher(key)
        except (TransportError, MalformedResponseError) as exc:
            logger.warning(f"Alignment for {key} not available: {exc}")
            words = None
        except Exception:
            logger.exception(f"Alignment fetch for {key} failed unexpectedly")
            words = None
        else:
            if result is None:
                logger.info(f"Alignment for {key} not available")
                words = None
            elif isinstance(result, AlignmentTrack):
                words = list(result.words)
            else:
                words = list(result)
        finally:
            self._inflight.pop(key, None)
        self._resolved[key] = words
        return words

    async def get_track(self, key: str) -> list[AlignedWord] | None:
        """Return the alignment words for ``key``, fetching at most once.

        Args:
            key: Stable job identifier of the document's alignment.

        Returns:
            The words in spoken order, or ``None`` when not available.
        """
        value = self._resolved.get(key, _MISSING)
        if value is not _MISSING:
            return value  # type: ignore[return-value]

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve(key))
            self._inflight[key] = task
        # Shield so a cancelled waiter does not cancel the shared fetch.
        return await asyncio.shield(task)
