"""Resolved portal configuration.

Example:
    >>> from portalfeeds.models.config import FeedConfig
    >>> from portalfeeds.models.base import FeedKind
    >>> cfg = FeedConfig(podcast_feed_url="https://example.com/podcast.xml")
    >>> cfg.url_for(FeedKind.PODCAST)
    'https://example.com/podcast.xml'
    >>> cfg.url_for(FeedKind.BLOG) is None
    True
"""

from __future__ import annotations

from pydantic import Field

from portalfeeds.models.base import FeedKind, PortalModel


class SeoConfig(PortalModel):
    """SEO metadata served to the public site."""

    meta_title: str = ""
    meta_description: str = ""
    meta_keywords: str = ""


class FeedConfig(PortalModel):
    """Active feed URLs and site settings for one config TTL window."""

    blog_feed_url: str | None = None
    video_feed_url: str | None = None
    podcast_feed_url: str | None = None
    site_name: str = ""
    author: str = ""
    seo: SeoConfig = Field(default_factory=SeoConfig)

    def url_for(self, kind: FeedKind) -> str | None:
        """Return the feed URL configured for ``kind``."""
        return {
            FeedKind.BLOG: self.blog_feed_url,
            FeedKind.VIDEO: self.video_feed_url,
            FeedKind.PODCAST: self.podcast_feed_url,
        }[FeedKind(kind)]
