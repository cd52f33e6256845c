"""Feed parser module.

One parser per feed kind, selected at this boundary:

- ``FeedKind.BLOG``: `ArticleFeedParser` (RSS 2.0 articles)
- ``FeedKind.VIDEO``: `VideoFeedParser` (Atom channel feed)
- ``FeedKind.PODCAST``: `PodcastFeedParser` (RSS with audio enclosures)

Example:
    >>> from portalfeeds.parser import get_parser
    >>> from portalfeeds.models.base import FeedKind
    >>> get_parser(FeedKind.VIDEO).kind
    <FeedKind.VIDEO: 'video'>
"""

from __future__ import annotations

from datetime import UTC, datetime

from portalfeeds.models.base import FeedKind
from portalfeeds.parser.atom import VideoFeedParser
from portalfeeds.parser.base import ATOM_NS, FeedParser, ParsedFeed, load_root
from portalfeeds.parser.podcast import PodcastFeedParser
from portalfeeds.parser.rss import ArticleFeedParser

PARSERS: dict[FeedKind, FeedParser] = {
    FeedKind.BLOG: ArticleFeedParser(),
    FeedKind.VIDEO: VideoFeedParser(),
    FeedKind.PODCAST: PodcastFeedParser(),
}


def get_parser(kind: FeedKind | str) -> FeedParser:
    """Return the parser for ``kind``."""
    return PARSERS[FeedKind(kind)]


def parse_feed(kind: FeedKind | str, raw: bytes | str, fetched_at: datetime | None = None) -> ParsedFeed:
    """Parse ``raw`` with the dialect for ``kind``.

    Args:
        kind: Feed kind selecting the dialect.
        raw: Raw document as fetched.
        fetched_at: Fallback timestamp for unusable entry dates
            (default: now).

    Returns:
        ParsedFeed with items ordered newest first.

    Raises:
        MalformedFeedError: If the document itself cannot be parsed.
    """
    return get_parser(kind).parse(raw, fetched_at or datetime.now(UTC))


def detect_feed_kind(raw: bytes | str, content_type: str = "") -> FeedKind:
    """Guess the dialect of a document whose kind is not known up front.

    Atom documents are video feeds; RSS documents with an audio
    enclosure are podcasts; any other RSS is a blog feed.

    Raises:
        MalformedFeedError: If the document is not well-formed XML.

    Example:
        >>> detect_feed_kind(b'<feed xmlns="http://www.w3.org/2005/Atom"/>')
        <FeedKind.VIDEO: 'video'>
        >>> detect_feed_kind(b"<rss><channel/></rss>")
        <FeedKind.BLOG: 'blog'>
    """
    if "atom" in content_type.lower():
        return FeedKind.VIDEO

    root = load_root(raw, "detect")
    if root.tag in (f"{{{ATOM_NS}}}feed", "feed"):
        return FeedKind.VIDEO
    for enclosure in root.iter("enclosure"):
        if (enclosure.get("type") or "").lower().startswith("audio/"):
            return FeedKind.PODCAST
    return FeedKind.BLOG


__all__ = [
    "ArticleFeedParser",
    "FeedParser",
    "PARSERS",
    "ParsedFeed",
    "PodcastFeedParser",
    "VideoFeedParser",
    "detect_feed_kind",
    "get_parser",
    "parse_feed",
]
