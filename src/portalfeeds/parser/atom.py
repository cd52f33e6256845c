"""Atom video feed parser.

Converts a YouTube channel feed (Atom with ``yt:`` and ``media:``
extensions) into `Video` items.

Example:
    >>> from portalfeeds.parser.atom import extract_video_id
    >>> extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=4")
    'dQw4w9WgXcQ'
    >>> extract_video_id("https://youtu.be/dQw4w9WgXcQ")
    'dQw4w9WgXcQ'
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from urllib.parse import parse_qs, urlparse

from portalfeeds.core.exceptions import MalformedFeedError
from portalfeeds.models.base import FeedKind
from portalfeeds.models.item import ChannelMetadata, Video
from portalfeeds.parser.base import (
    ATOM_NS,
    NS,
    ParsedFeed,
    child_attr,
    child_text,
    load_root,
    sort_newest_first,
)
from portalfeeds.parser.normalize import parse_date, sanitize_html

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

_PATH_PREFIXES = ("/shorts/", "/embed/", "/live/", "/v/")


def extract_video_id(url: str) -> str:
    """Pull the video id out of a YouTube link, or return ``""``.

    Example:
        >>> extract_video_id("https://www.youtube.com/shorts/abc123")
        'abc123'
        >>> extract_video_id("https://example.com/page")
        ''
    """
    if not url:
        return ""
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()

    if host == "youtu.be":
        return parsed.path.strip("/").split("/")[0]

    if host.endswith("youtube.com") or host.endswith("youtube-nocookie.com"):
        video_ids = parse_qs(parsed.query).get("v")
        if video_ids and video_ids[0]:
            return video_ids[0]
        for prefix in _PATH_PREFIXES:
            if parsed.path.startswith(prefix):
                return parsed.path[len(prefix) :].split("/")[0]

    return ""


def _alternate_link(entry: ET.Element) -> str:
    links = entry.findall("atom:link", NS)
    for link in links:
        if link.get("rel", "alternate") == "alternate" and link.get("href"):
            return link.get("href", "").strip()
    return (links[0].get("href") or "").strip() if links else ""


class VideoFeedParser:
    """Parser for the Atom video dialect."""

    kind = FeedKind.VIDEO

    def parse(self, raw: bytes | str, fetched_at: datetime) -> ParsedFeed:
        """Parse an Atom document into videos, newest first.

        Raises:
            MalformedFeedError: If the document is not a well-formed Atom feed.
        """
        root = load_root(raw, self.kind.value)
        if root.tag != f"{{{ATOM_NS}}}feed":
            raise MalformedFeedError(f"Expected an Atom feed, got <{root.tag}>", source=self.kind.value)

        videos: list[Video] = []
        seen_ids: set[str] = set()
        skipped = 0

        for entry in root.findall("atom:entry", NS):
            video = self._parse_entry(entry, fetched_at)
            if video is None or video.id in seen_ids:
                if video is not None:
                    logger.warning("Skipping duplicate video id %s", video.id)
                skipped += 1
                continue
            seen_ids.add(video.id)
            videos.append(video)

        updated = child_text(root, "atom:updated")
        channel = ChannelMetadata(
            title=child_text(root, "atom:title"),
            link=_alternate_link(root),
            description=child_text(root, "atom:subtitle"),
            last_build_date=parse_date(updated, fetched_at) if updated else None,
        )
        return ParsedFeed(kind=self.kind, items=sort_newest_first(videos), channel=channel, skipped=skipped)

    def _parse_entry(self, entry: ET.Element, fetched_at: datetime) -> Video | None:
        title = child_text(entry, "atom:title") or child_text(entry, "media:group/media:title")
        link = _alternate_link(entry)

        video_id = child_text(entry, "yt:videoId") or extract_video_id(link)
        if not video_id:
            atom_id = child_text(entry, "atom:id")
            if atom_id.startswith("yt:video:"):
                video_id = atom_id[len("yt:video:") :]

        if video_id and not link:
            link = WATCH_URL.format(video_id=video_id)

        if not title or not link or not video_id:
            logger.warning("Skipping video entry without title, link or id: %r", title or link)
            return None

        published = child_text(entry, "atom:published") or child_text(entry, "atom:updated")
        thumbnail = child_attr(entry, "media:group/media:thumbnail", "url") or child_attr(
            entry, "media:thumbnail", "url"
        )
        description = child_text(entry, "media:group/media:description") or child_text(entry, "atom:summary")

        try:
            return Video(
                id=video_id,
                title=title,
                link=link,
                published_at=parse_date(published, fetched_at),
                description=sanitize_html(description) or None,
                thumbnail=thumbnail or None,
            )
        except ValueError as e:
            logger.warning("Invalid video entry %r: %s", title, e)
            return None
