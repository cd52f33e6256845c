"""In-memory cache with TTL, single-flight loading and stale-on-error.

Provides the process-wide keyed store behind both the feed store and
the config resolver. Values are loaded through a caller-supplied async
loader; the cache guarantees:

- a non-expired entry is returned without I/O
- at most one load per key is in flight; concurrent callers share it
- a failed load never replaces an existing entry, and callers get the
  previous (possibly expired) value back instead of the error

Example:
    >>> import asyncio
    >>> from portalfeeds.cache.memory import MemoryCache
    >>> cache = MemoryCache(ttl_seconds=60)
    >>> async def load():
    ...     return ["item"]
    >>> result = asyncio.run(cache.get_or_load("key", load))
    >>> result.value, result.fresh
    (['item'], True)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Generic, TypeVar

from portalfeeds.core.exceptions import PortalFeedsError

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A loaded value and when it was loaded.

    Entries are immutable; a refresh replaces the whole entry, so a
    reader holds either the old snapshot or the new one.

    Example:
        >>> from datetime import UTC, datetime, timedelta
        >>> from portalfeeds.cache.memory import CacheEntry
        >>> loaded = datetime(2026, 1, 1, tzinfo=UTC)
        >>> entry = CacheEntry(value="data", fetched_at=loaded, ttl_seconds=180)
        >>> entry.is_expired(loaded + timedelta(seconds=60))
        False
        >>> entry.is_expired(loaded + timedelta(seconds=180))
        True
    """

    value: V
    fetched_at: datetime
    ttl_seconds: int

    @property
    def expires_at(self) -> datetime:
        """When this entry stops being fresh."""
        return self.fetched_at + timedelta(seconds=self.ttl_seconds)

    def is_expired(self, now: datetime) -> bool:
        """Check whether the entry has expired at ``now``."""
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheResult(Generic[V]):
    """Outcome of a cache read.

    Attributes:
        value: The cached or freshly loaded value.
        fetched_at: When ``value`` was loaded.
        fresh: False when a refresh failed and a stale value was served.
        loaded: True when this read performed or joined a load.
        error: The refresh failure behind a stale result.
    """

    value: V
    fetched_at: datetime
    fresh: bool = True
    loaded: bool = False
    error: Exception | None = None

    @property
    def stale(self) -> bool:
        """True when served stale because a refresh failed."""
        return not self.fresh


class MemoryCache(Generic[K, V]):
    """Keyed TTL cache with single-flight loads.

    Safe for concurrent use from many tasks on one event loop. Different
    keys load independently and in parallel.

    Forced refreshes skip the freshness check but still join a load that
    is already in flight for the key instead of starting another one.

    Example:
        >>> import asyncio
        >>> from portalfeeds.cache.memory import MemoryCache
        >>> cache = MemoryCache()
        >>> calls = []
        >>> async def load():
        ...     calls.append(1)
        ...     await asyncio.sleep(0.01)
        ...     return "v"
        >>> async def burst():
        ...     return await asyncio.gather(*(cache.get_or_load("k", load) for _ in range(5)))
        >>> [r.value for r in asyncio.run(burst())], len(calls)
        (['v', 'v', 'v', 'v', 'v'], 1)
    """

    def __init__(self, ttl_seconds: int = 180, clock: Clock | None = None) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Default time-to-live of loaded entries.
            clock: Source of the current time (tests inject a fake one).
        """
        self._ttl_seconds = ttl_seconds
        self._clock = clock or utc_now
        self._data: dict[K, CacheEntry[V]] = {}
        self._inflight: dict[K, asyncio.Task[CacheEntry[V]]] = {}

    @property
    def ttl_seconds(self) -> int:
        """Default TTL in seconds."""
        return self._ttl_seconds

    def peek(self, key: K) -> CacheEntry[V] | None:
        """Return the current entry for ``key`` (even if expired) without loading."""
        return self._data.get(key)

    def is_loading(self, key: K) -> bool:
        """Check whether a load for ``key`` is in flight."""
        return key in self._inflight

    async def get_or_load(
        self,
        key: K,
        loader: Callable[[], Awaitable[V]],
        *,
        force_refresh: bool = False,
        ttl_seconds: int | None = None,
    ) -> CacheResult[V]:
        """Return the value for ``key``, loading it when missing or expired.

        Args:
            key: Cache key.
            loader: Async callable producing a new value.
            force_refresh: Skip the freshness check.
            ttl_seconds: TTL for a newly loaded entry (default: cache TTL).

        Returns:
            CacheResult; ``fresh`` is False when a refresh failed and the
            previous value was served instead.

        Raises:
            PortalFeedsError: If the load fails and no previous entry exists.
        """
        entry = self._data.get(key)
        if entry is not None and not force_refresh and not entry.is_expired(self._clock()):
            return CacheResult(value=entry.value, fetched_at=entry.fetched_at)

        try:
            entry = await self._load_shared(key, loader, ttl_seconds)
        except PortalFeedsError as e:
            previous = self._data.get(key)
            if previous is None:
                raise
            logger.warning("Refresh of %r failed, serving entry from %s: %s", key, previous.fetched_at, e)
            return CacheResult(
                value=previous.value,
                fetched_at=previous.fetched_at,
                fresh=False,
                loaded=True,
                error=e,
            )

        return CacheResult(value=entry.value, fetched_at=entry.fetched_at, loaded=True)

    async def _load_shared(
        self,
        key: K,
        loader: Callable[[], Awaitable[V]],
        ttl_seconds: int | None,
    ) -> CacheEntry[V]:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, loader, ttl_seconds))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            logger.debug("Joining in-flight load for %r", key)

        # The load outlives a cancelled caller; other waiters still need it.
        return await asyncio.shield(task)

    async def _load(
        self,
        key: K,
        loader: Callable[[], Awaitable[V]],
        ttl_seconds: int | None,
    ) -> CacheEntry[V]:
        value = await loader()
        entry = CacheEntry(
            value=value,
            fetched_at=self._clock(),
            ttl_seconds=self._ttl_seconds if ttl_seconds is None else ttl_seconds,
        )
        self._data[key] = entry
        return entry

    def _forget(self, key: K, task: asyncio.Task[CacheEntry[V]]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # Mark the exception retrieved when every waiter was cancelled.
            task.exception()

    # --- Utility Methods ---

    def __len__(self) -> int:
        """Return number of entries (including expired)."""
        return len(self._data)

    def keys(self) -> list[K]:
        """Return all keys that hold an entry."""
        return list(self._data)
