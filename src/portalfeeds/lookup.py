"""Lookup service: lists and single-item lookups over cached feeds.

The ``find_*`` functions are pure linear scans over an item sequence.
Feeds hold tens to low hundreds of items, so there is no index; a
much larger feed would want one built per snapshot.

`FeedService` resolves the active feed URL, reads the snapshot from
the `FeedStore` and applies those scans. It does no I/O of its own.

Example:
    >>> from datetime import UTC, datetime
    >>> from portalfeeds.lookup import find_by_slug
    >>> from portalfeeds.models.item import Post
    >>> posts = [Post(title="Hi", link="https://b/p/hi", slug="hi", published_at=datetime.now(UTC))]
    >>> find_by_slug(posts, "hi").title
    'Hi'
    >>> find_by_slug(posts, "nope") is None
    True
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from portalfeeds.config.resolver import ConfigResolver
from portalfeeds.core.exceptions import ConfigurationError, NotFoundError
from portalfeeds.models.base import FeedKind
from portalfeeds.models.config import FeedConfig
from portalfeeds.models.item import Podcast, Post, Video
from portalfeeds.store import FeedSnapshot, FeedStore

logger = logging.getLogger(__name__)

Item = Post | Video | Podcast


# =============================================================================
# Pure lookups
# =============================================================================


def find_by_slug(items: Iterable[Item], slug: str) -> Post | Podcast | None:
    """Return the post or episode with ``slug``."""
    for item in items:
        if isinstance(item, Post | Podcast) and item.slug == slug:
            return item
    return None


def find_by_id(items: Iterable[Item], video_id: str) -> Video | None:
    """Return the video with platform id ``video_id``."""
    for item in items:
        if isinstance(item, Video) and item.id == video_id:
            return item
    return None


def find_by_guid_or_slug(items: Iterable[Item], key: str) -> Podcast | None:
    """Return the episode whose guid or slug equals ``key``.

    A guid match wins over a slug match elsewhere in the list.
    """
    episodes = [item for item in items if isinstance(item, Podcast)]
    for episode in episodes:
        if episode.guid == key:
            return episode
    for episode in episodes:
        if episode.slug == key:
            return episode
    return None


def paginate(items: tuple[Item, ...], offset: int = 0, limit: int | None = None) -> list[Item]:
    """Slice an ordered item tuple.

    Example:
        >>> paginate((1, 2, 3, 4), offset=1, limit=2)
        [2, 3]
    """
    offset = max(offset, 0)
    end = None if limit is None else offset + max(limit, 0)
    return list(items[offset:end])


# =============================================================================
# Service
# =============================================================================


class FeedService:
    """Reads feeds through the config resolver and the feed store.

    Example:
        >>> service = FeedService(store, resolver)
        >>> posts = await service.list_items("blog", limit=6)
        >>> episode = await service.find_by_guid_or_slug("podcast", "episode-1")
    """

    def __init__(self, store: FeedStore, resolver: ConfigResolver) -> None:
        self._store = store
        self._resolver = resolver

    @property
    def store(self) -> FeedStore:
        """The underlying feed store."""
        return self._store

    @property
    def resolver(self) -> ConfigResolver:
        """The config resolver."""
        return self._resolver

    async def config(self, force_refresh: bool = False) -> FeedConfig:
        """Return the active configuration."""
        return await self._resolver.resolve(force_refresh=force_refresh)

    async def snapshot(self, kind: FeedKind | str, force_refresh: bool = False) -> FeedSnapshot | None:
        """Return the current snapshot of feed ``kind``, or None if unconfigured.

        Raises:
            FetchError: If upstream fails and nothing was cached before.
            MalformedFeedError: If the feed is unparsable and nothing was
                cached before.
        """
        kind = FeedKind(kind)
        config = await self._resolver.resolve()
        url = config.url_for(kind)
        if not url:
            logger.debug("No %s feed configured", kind.value)
            return None
        return await self._store.get(kind, url, force_refresh=force_refresh)

    async def list_items(
        self,
        kind: FeedKind | str,
        force_refresh: bool = False,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Item]:
        """Return a page of feed ``kind``, newest first.

        An unconfigured feed yields an empty list.
        """
        snapshot = await self.snapshot(kind, force_refresh=force_refresh)
        if snapshot is None:
            return []
        return paginate(snapshot.items, offset=offset, limit=limit)

    async def _items(self, kind: FeedKind) -> tuple[Item, ...]:
        snapshot = await self.snapshot(kind)
        if snapshot is None:
            raise NotFoundError(f"No {kind.value} feed configured")
        return snapshot.items

    async def find_by_slug(self, kind: FeedKind | str, slug: str) -> Post | Podcast:
        """Return the post (or episode) with ``slug``.

        Raises:
            NotFoundError: If no item matches or the feed is unconfigured.
        """
        kind = FeedKind(kind)
        item = find_by_slug(await self._items(kind), slug)
        if item is None:
            raise NotFoundError(f"No {kind.value} item with slug {slug!r}")
        return item

    async def find_by_id(self, kind: FeedKind | str, video_id: str) -> Video:
        """Return the video with ``video_id``.

        Raises:
            NotFoundError: If no video matches or the feed is unconfigured.
        """
        kind = FeedKind(kind)
        item = find_by_id(await self._items(kind), video_id)
        if item is None:
            raise NotFoundError(f"No {kind.value} item with id {video_id!r}")
        return item

    async def find_by_guid_or_slug(self, kind: FeedKind | str, key: str) -> Podcast:
        """Return the podcast episode whose guid or slug is ``key``.

        Raises:
            ConfigurationError: If ``kind`` is not the podcast feed.
            NotFoundError: If no episode matches or the feed is unconfigured.
        """
        kind = FeedKind(kind)
        if kind is not FeedKind.PODCAST:
            raise ConfigurationError("Lookup by guid or slug only applies to the podcast feed")
        item = find_by_guid_or_slug(await self._items(kind), key)
        if item is None:
            raise NotFoundError(f"No podcast episode with guid or slug {key!r}")
        return item
