"""Feed store: cached, normalized feed snapshots keyed by (kind, url).

The store ties the fetcher, the dialect parsers and the memory cache
together. It is constructed once per process (or once per test) and
injected wherever feeds are read; there is no module-level instance.

Example:
    >>> from portalfeeds.http import FeedFetcher
    >>> from portalfeeds.store import FeedStore
    >>>
    >>> store = FeedStore(FeedFetcher(timeout=5.0), ttl_seconds=180)
    >>> snapshot = await store.get("blog", "https://example.substack.com/feed")
    >>> snapshot.items[0].title
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from portalfeeds.cache.memory import Clock, MemoryCache, utc_now
from portalfeeds.http.fetcher import FetchResponse
from portalfeeds.models.base import FeedKind
from portalfeeds.models.item import ChannelMetadata, Podcast, Post, Video
from portalfeeds.parser import ParsedFeed, parse_feed

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Anything that can GET a URL into a FetchResponse."""

    async def fetch(self, url: str) -> FetchResponse: ...


@dataclass(frozen=True)
class FeedSnapshot:
    """What a store read returns.

    Attributes:
        kind: Feed kind.
        url: Feed URL.
        items: Canonical items, newest first.
        channel: Channel metadata of the feed.
        fetched_at: When the items were fetched.
        fresh: False when a refresh failed and older items were served.
        error: The refresh failure behind a stale snapshot.
    """

    kind: FeedKind
    url: str
    items: tuple[Post | Video | Podcast, ...]
    channel: ChannelMetadata
    fetched_at: datetime
    fresh: bool = True
    error: Exception | None = None


class FeedStore:
    """Process-wide feed cache with single-flight refresh and stale fallback.

    Example:
        >>> from portalfeeds.store import FeedStore
        >>> store = FeedStore(fetcher=my_fetcher, ttl_seconds=180)
        >>> len(store)
        0
    """

    def __init__(
        self,
        fetcher: Fetcher,
        ttl_seconds: int = 180,
        clock: Clock | None = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            fetcher: Fetcher used for upstream feed documents.
            ttl_seconds: Freshness window of a fetched feed.
            clock: Source of the current time.
        """
        self._fetcher = fetcher
        self._clock = clock or utc_now
        self._cache: MemoryCache[tuple[FeedKind, str], ParsedFeed] = MemoryCache(
            ttl_seconds=ttl_seconds,
            clock=self._clock,
        )

    @property
    def ttl_seconds(self) -> int:
        """Feed TTL in seconds."""
        return self._cache.ttl_seconds

    async def get(self, kind: FeedKind | str, url: str, force_refresh: bool = False) -> FeedSnapshot:
        """Return the items of feed ``url``, refreshing when expired.

        Args:
            kind: Feed kind selecting the parser dialect.
            url: Feed URL.
            force_refresh: Refetch even if the cached entry is fresh.

        Returns:
            FeedSnapshot; ``fresh`` is False when upstream failed and the
            previous items were served.

        Raises:
            FetchError: If the fetch fails and nothing was cached before.
            MalformedFeedError: If the document is unparsable and nothing
                was cached before.
        """
        kind = FeedKind(kind)
        result = await self._cache.get_or_load(
            (kind, url),
            lambda: self._fetch_and_parse(kind, url),
            force_refresh=force_refresh,
        )
        feed = result.value
        return FeedSnapshot(
            kind=kind,
            url=url,
            items=feed.items,
            channel=feed.channel,
            fetched_at=result.fetched_at,
            fresh=result.fresh,
            error=result.error,
        )

    async def _fetch_and_parse(self, kind: FeedKind, url: str) -> ParsedFeed:
        response = await self._fetcher.fetch(url)
        feed = parse_feed(kind, response.content, fetched_at=self._clock())
        logger.info(
            "Fetched %s feed %s: %d items (%d skipped)",
            kind.value,
            url,
            len(feed.items),
            feed.skipped,
        )
        return feed

    async def close(self) -> None:
        """Release the fetcher's connections. Cached entries are kept."""
        close = getattr(self._fetcher, "close", None)
        if close is not None:
            await close()

    def __len__(self) -> int:
        """Number of cached feeds."""
        return len(self._cache)
