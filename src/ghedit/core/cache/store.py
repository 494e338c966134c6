"""In-memory TTL cache for data fetched through the gh CLI.

Entries carry only their write timestamp. Freshness is decided at read time
against a TTL supplied by the caller, so two callers can apply different
freshness policies to the same entry.
"""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from ghedit.core.time.abc import Time

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the clock reading when it was written."""

    key: str
    payload: Any
    written_at: float


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache usage for diagnostics."""

    entry_count: int
    keys: list[str]
    in_flight: list[str]


class TTLCacheStore:
    """Keyed store with caller-supplied TTL and coalesced fetches.

    Usage:
        cache = TTLCacheStore(time=RealTime())
        issues = await cache.get_or_fetch("issues_owner_repo:open", fetch, 300)

    There is no eviction and no capacity bound: keys are per-repository and
    per-filter, so their number stays small. Entries live until cleared.
    """

    def __init__(self, time: Time) -> None:
        self._time = time
        self._entries: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Future[Any]] = {}
        self._lock = threading.Lock()

    def write(self, key: str, payload: Any) -> None:
        """Store payload under key, replacing any existing entry."""
        entry = CacheEntry(key=key, payload=payload, written_at=self._time.now())
        with self._lock:
            self._entries[key] = entry

    def read(self, key: str) -> Any | None:
        """Return the last written payload for key, or None if never written.

        Freshness is not considered here; use is_valid() for that.
        """
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        return entry.payload

    def is_valid(self, key: str, ttl_seconds: float) -> bool:
        """Check whether key holds an entry younger than ttl_seconds.

        A TTL of zero (or less) is never valid, which forces a fresh fetch.
        """
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return False
        return (self._time.now() - entry.written_at) < ttl_seconds

    def clear(self, key: str) -> None:
        """Remove a single entry. Clearing a missing key is a no-op."""
        with self._lock:
            self._entries.pop(key, None)

    def clear_prefix(self, prefix: str) -> list[str]:
        """Remove every entry whose key starts with prefix.

        Returns:
            The keys that were removed
        """
        with self._lock:
            removed = [key for key in self._entries if key.startswith(prefix)]
            for key in removed:
                del self._entries[key]
        return removed

    def clear_all(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                entry_count=len(self._entries),
                keys=sorted(self._entries),
                in_flight=sorted(self._in_flight),
            )

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[T]],
        ttl_seconds: float,
    ) -> T:
        """Return the cached payload for key, fetching it if stale or absent.

        Concurrent calls for the same key while a fetch is running share that
        fetch instead of starting another one.

        Args:
            key: Cache key (see FilterContext.cache_key)
            fetch_fn: Zero-argument coroutine function producing the payload
            ttl_seconds: Maximum age of an entry that may be returned

        Returns:
            The cached or freshly fetched payload

        Raises:
            Whatever fetch_fn raises. Nothing is written on failure and any
            existing (stale) entry is left untouched.
        """
        if self.is_valid(key, ttl_seconds):
            logger.debug("Cache hit for %s", key)
            return self.read(key)

        with self._lock:
            pending = self._in_flight.get(key)
            if pending is None:
                pending = asyncio.ensure_future(self._fetch_and_write(key, fetch_fn))
                self._in_flight[key] = pending
                pending.add_done_callback(lambda done: self._forget_in_flight(key, done))
                logger.debug("Cache miss for %s, fetching", key)
            else:
                logger.debug("Joining in-flight fetch for %s", key)

        # shield() keeps the shared fetch alive if one waiter is cancelled
        return await asyncio.shield(pending)

    async def _fetch_and_write(self, key: str, fetch_fn: Callable[[], Awaitable[T]]) -> T:
        payload = await fetch_fn()
        self.write(key, payload)
        return payload

    def _forget_in_flight(self, key: str, done: asyncio.Future[Any]) -> None:
        with self._lock:
            if self._in_flight.get(key) is done:
                del self._in_flight[key]
        # Mark a failure as retrieved when every waiter has gone away
        if not done.cancelled():
            done.exception()
