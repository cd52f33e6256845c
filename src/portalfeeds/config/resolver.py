"""Config resolver: active feed URLs from remote document + environment.

The remote document is cached with the same TTL and single-flight
discipline as feed data, under the constant key ``"config"``. Every
field falls back to its own environment default, so a document that
only sets ``feeds.podcast`` leaves the blog and video URLs at their
defaults. An unreachable document degrades to pure defaults; resolve()
never raises.

Recognized document shape (all keys optional)::

    {
      "feeds": {"blog": "...", "video": "...", "podcast": "..."},
      "blogRssUrl": "...", "youtubeRssUrl": "...", "podcastFeedUrl": "...",
      "siteName": "...", "author": "...",
      "seo": {"metaTitle": "...", "metaDescription": "...", "metaKeywords": "..."}
    }

Example:
    >>> from portalfeeds.config.resolver import merge_config
    >>> from portalfeeds.core.config import Settings
    >>> env = Settings(blog_feed_url="https://env/blog", podcast_feed_url="https://env/pod")
    >>> cfg = merge_config({"feeds": {"podcast": "https://remote/pod"}}, env)
    >>> cfg.blog_feed_url, cfg.podcast_feed_url
    ('https://env/blog', 'https://remote/pod')
"""

from __future__ import annotations

import logging
from typing import Any

from portalfeeds.cache.memory import Clock, MemoryCache
from portalfeeds.config.source import ConfigSource
from portalfeeds.core.config import Settings
from portalfeeds.core.exceptions import ConfigUnavailableError
from portalfeeds.models.config import FeedConfig, SeoConfig

logger = logging.getLogger(__name__)

CONFIG_KEY = "config"


def _first(*values: Any) -> str | None:
    """First non-blank string among ``values``."""
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _group(document: dict[str, Any], name: str) -> dict[str, Any]:
    group = document.get(name)
    return group if isinstance(group, dict) else {}


def merge_config(document: dict[str, Any] | None, settings: Settings) -> FeedConfig:
    """Merge a remote config document over environment defaults, field by field."""
    document = document or {}
    feeds = _group(document, "feeds")
    seo = _group(document, "seo")

    return FeedConfig(
        blog_feed_url=_first(feeds.get("blog"), document.get("blogRssUrl"), settings.blog_feed_url),
        video_feed_url=_first(
            feeds.get("video"),
            feeds.get("youtube"),
            document.get("youtubeRssUrl"),
            settings.youtube_feed_url,
        ),
        podcast_feed_url=_first(feeds.get("podcast"), document.get("podcastFeedUrl"), settings.podcast_feed_url),
        site_name=_first(document.get("siteName"), settings.site_name) or "",
        author=_first(document.get("author"), settings.author) or "",
        seo=SeoConfig(
            meta_title=_first(seo.get("metaTitle"), settings.meta_title) or "",
            meta_description=_first(seo.get("metaDescription"), settings.meta_description) or "",
            meta_keywords=_first(seo.get("metaKeywords"), settings.meta_keywords) or "",
        ),
    )


class ConfigResolver:
    """Resolves the active FeedConfig, caching the remote document.

    Example:
        >>> import asyncio
        >>> from portalfeeds.config.resolver import ConfigResolver
        >>> from portalfeeds.core.config import Settings
        >>> resolver = ConfigResolver(Settings(youtube_feed_url="https://env/videos"), source=None)
        >>> asyncio.run(resolver.resolve()).video_feed_url
        'https://env/videos'
    """

    def __init__(
        self,
        settings: Settings,
        source: ConfigSource | None,
        ttl_seconds: int | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            settings: Environment defaults.
            source: Remote document source, or None for env-only config.
            ttl_seconds: Document TTL (default: ``settings.config_ttl_seconds``).
            clock: Source of the current time.
        """
        self._settings = settings
        self._source = source
        self._cache: MemoryCache[str, dict[str, Any]] = MemoryCache(
            ttl_seconds=settings.config_ttl_seconds if ttl_seconds is None else ttl_seconds,
            clock=clock,
        )

    @property
    def settings(self) -> Settings:
        """Environment defaults."""
        return self._settings

    async def resolve(self, force_refresh: bool = False) -> FeedConfig:
        """Return the active configuration; never raises for remote trouble."""
        document: dict[str, Any] = {}
        if self._source is not None:
            try:
                result = await self._cache.get_or_load(
                    CONFIG_KEY,
                    self._load_document,
                    force_refresh=force_refresh,
                )
                document = result.value
            except ConfigUnavailableError as e:
                logger.warning("Remote config unavailable, using environment defaults: %s", e)
        return merge_config(document, self._settings)

    async def _load_document(self) -> dict[str, Any]:
        document = await self._source.load()  # type: ignore[union-attr]
        return document or {}
