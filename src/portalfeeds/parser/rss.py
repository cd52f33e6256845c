"""RSS 2.0 article feed parser.

Converts a blog feed (Substack and similar) into `Post` items. Full
article HTML comes from ``content:encoded`` when present, falling back
to ``description``; both are sanitized.

Example:
    >>> from datetime import UTC, datetime
    >>> from portalfeeds.parser.rss import ArticleFeedParser
    >>> xml = b'''<rss version="2.0"><channel><title>Blog</title>
    ...   <item><title>Hello</title><link>https://b/p/hello</link></item>
    ... </channel></rss>'''
    >>> feed = ArticleFeedParser().parse(xml, datetime.now(UTC))
    >>> [post.slug for post in feed.items]
    ['hello']
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime

from portalfeeds.models.base import FeedKind
from portalfeeds.models.item import ChannelMetadata, Post
from portalfeeds.parser.base import (
    ParsedFeed,
    child_attr,
    child_text,
    load_root,
    rss_channel,
    sort_newest_first,
)
from portalfeeds.parser.normalize import SlugRegistry, first_image, parse_date, sanitize_html

logger = logging.getLogger(__name__)


def channel_metadata(channel: ET.Element, fetched_at: datetime) -> ChannelMetadata:
    """Extract title/link/description/lastBuildDate of an RSS channel."""
    build_date = child_text(channel, "lastBuildDate")
    return ChannelMetadata(
        title=child_text(channel, "title"),
        link=child_text(channel, "link"),
        description=child_text(channel, "description"),
        last_build_date=parse_date(build_date, fetched_at) if build_date else None,
    )


def enclosure_url(item: ET.Element, media_prefix: str) -> str:
    """URL of the first ``<enclosure>`` whose type starts with ``media_prefix``."""
    for enclosure in item.findall("enclosure"):
        url = (enclosure.get("url") or "").strip()
        if url and (enclosure.get("type") or "").lower().startswith(media_prefix):
            return url
    return ""


class ArticleFeedParser:
    """Parser for the RSS 2.0 blog/article dialect."""

    kind = FeedKind.BLOG

    def parse(self, raw: bytes | str, fetched_at: datetime) -> ParsedFeed:
        """Parse an RSS 2.0 document into posts, newest first.

        Raises:
            MalformedFeedError: If the document is not well-formed RSS.
        """
        channel = rss_channel(load_root(raw, self.kind.value), self.kind.value)
        slugs = SlugRegistry()
        posts: list[Post] = []
        skipped = 0

        for item in channel.findall("item"):
            post = self._parse_item(item, slugs, fetched_at)
            if post is None:
                skipped += 1
                continue
            posts.append(post)

        return ParsedFeed(
            kind=self.kind,
            items=sort_newest_first(posts),
            channel=channel_metadata(channel, fetched_at),
            skipped=skipped,
        )

    def _parse_item(self, item: ET.Element, slugs: SlugRegistry, fetched_at: datetime) -> Post | None:
        title = child_text(item, "title")
        link = child_text(item, "link")
        if not title or not link:
            logger.warning("Skipping blog item without title or link: %r", title or link)
            return None

        guid = child_text(item, "guid") or None
        description = sanitize_html(child_text(item, "description"))
        encoded = child_text(item, "content:encoded")
        content = sanitize_html(encoded) if encoded else description

        image = (
            enclosure_url(item, "image/")
            or child_attr(item, "media:content", "url")
            or child_attr(item, "media:thumbnail", "url")
            or first_image(content)
        )
        author = child_text(item, "dc:creator") or child_text(item, "author") or None

        try:
            return Post(
                title=title,
                link=link,
                published_at=parse_date(child_text(item, "pubDate"), fetched_at),
                slug=slugs.claim(title, guid),
                description=description,
                content=content,
                image=image or None,
                author=author,
                guid=guid,
            )
        except ValueError as e:
            logger.warning("Invalid blog item %r: %s", title, e)
            return None
