"""RSS podcast feed parser.

Converts an RSS 2.0 feed with audio ``<enclosure>`` elements and
iTunes extensions into `Podcast` items.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime

from portalfeeds.models.base import FeedKind
from portalfeeds.models.item import Podcast
from portalfeeds.parser.base import (
    ParsedFeed,
    child_attr,
    child_text,
    load_root,
    rss_channel,
    sort_newest_first,
)
from portalfeeds.parser.normalize import SlugRegistry, parse_date, sanitize_html
from portalfeeds.parser.rss import channel_metadata, enclosure_url

logger = logging.getLogger(__name__)


class PodcastFeedParser:
    """Parser for the RSS podcast-with-enclosure dialect."""

    kind = FeedKind.PODCAST

    def parse(self, raw: bytes | str, fetched_at: datetime) -> ParsedFeed:
        """Parse a podcast RSS document into episodes, newest first.

        Raises:
            MalformedFeedError: If the document is not well-formed RSS.
        """
        channel = rss_channel(load_root(raw, self.kind.value), self.kind.value)
        channel_image = child_attr(channel, "itunes:image", "href") or child_text(channel, "image/url")

        slugs = SlugRegistry(fallback="episode")
        episodes: list[Podcast] = []
        seen_guids: set[str] = set()
        skipped = 0

        for item in channel.findall("item"):
            episode = self._parse_item(item, slugs, fetched_at, channel_image, seen_guids)
            if episode is None:
                skipped += 1
                continue
            seen_guids.add(episode.guid)
            episodes.append(episode)

        return ParsedFeed(
            kind=self.kind,
            items=sort_newest_first(episodes),
            channel=channel_metadata(channel, fetched_at),
            skipped=skipped,
        )

    def _parse_item(
        self,
        item: ET.Element,
        slugs: SlugRegistry,
        fetched_at: datetime,
        channel_image: str,
        seen_guids: set[str],
    ) -> Podcast | None:
        title = child_text(item, "title") or child_text(item, "itunes:title")
        audio_url = enclosure_url(item, "audio/") or child_attr(item, "enclosure", "url")
        link = child_text(item, "link") or audio_url

        if not title or not link:
            logger.warning("Skipping podcast item without title or link: %r", title or link)
            return None
        if not audio_url:
            logger.warning("Skipping podcast item without audio enclosure: %r", title)
            return None

        guid = child_text(item, "guid") or audio_url
        if guid in seen_guids:
            logger.warning("Skipping duplicate podcast guid %s", guid)
            return None
        description = child_text(item, "itunes:summary") or child_text(item, "description")
        image = child_attr(item, "itunes:image", "href") or channel_image

        try:
            return Podcast(
                guid=guid,
                slug=slugs.claim(title, guid),
                title=title,
                link=link,
                published_at=parse_date(child_text(item, "pubDate"), fetched_at),
                description=sanitize_html(description) or None,
                audio_url=audio_url,
                duration=child_text(item, "itunes:duration") or None,
                image=image or None,
            )
        except ValueError as e:
            logger.warning("Invalid podcast item %r: %s", title, e)
            return None
