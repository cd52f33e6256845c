"""Shared parser plumbing.

Provides the FeedParser protocol every dialect implements, the
ParsedFeed result type and small ElementTree helpers.

Dialects share almost nothing beyond their output shape, so there is
no base class: each parser is a standalone class with a ``parse``
method.

Example:
    >>> from portalfeeds.parser.base import FeedParser
    >>> hasattr(FeedParser, "parse")
    True
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, runtime_checkable

from portalfeeds.core.exceptions import MalformedFeedError
from portalfeeds.models.base import FeedKind
from portalfeeds.models.item import ChannelMetadata, Podcast, Post, Video

ATOM_NS = "http://www.w3.org/2005/Atom"

# Namespace prefixes used in find() paths
NS = {
    "atom": ATOM_NS,
    "content": "http://purl.org/rss/1.0/modules/content/",
    "dc": "http://purl.org/dc/elements/1.1/",
    "itunes": "http://www.itunes.com/dtds/podcast-1.0.dtd",
    "media": "http://search.yahoo.com/mrss/",
    "yt": "http://www.youtube.com/xml/schemas/2015",
}


@dataclass(frozen=True)
class ParsedFeed:
    """Items of one parse pass, newest first, plus channel metadata.

    Example:
        >>> from portalfeeds.parser.base import ParsedFeed
        >>> from portalfeeds.models.base import FeedKind
        >>> ParsedFeed(kind=FeedKind.BLOG).items
        ()
    """

    kind: FeedKind
    items: tuple[Post | Video | Podcast, ...] = ()
    channel: ChannelMetadata = field(default_factory=ChannelMetadata)
    skipped: int = 0


@runtime_checkable
class FeedParser(Protocol):
    """Protocol for feed dialect parsers."""

    kind: FeedKind

    def parse(self, raw: bytes | str, fetched_at: datetime) -> ParsedFeed:
        """Parse a raw document into canonical items.

        Args:
            raw: Document bytes as fetched.
            fetched_at: Fallback timestamp for entries with unusable dates.

        Raises:
            MalformedFeedError: If the document itself is unparsable.
        """
        ...


def load_root(raw: bytes | str, source: str) -> ET.Element:
    """Parse ``raw`` into an XML root element.

    Raises:
        MalformedFeedError: If the payload is empty or not well-formed XML.
    """
    if not raw or not raw.strip():
        raise MalformedFeedError("Empty feed document", source=source)
    try:
        return ET.fromstring(raw)
    except ET.ParseError as e:
        raise MalformedFeedError(f"Failed to parse feed XML: {e}", source=source, cause=e) from e


def rss_channel(root: ET.Element, source: str) -> ET.Element:
    """Return the ``<channel>`` of an RSS 2.0 document.

    Raises:
        MalformedFeedError: If the root is not ``<rss>`` with a channel.
    """
    channel = root.find("channel") if root.tag == "rss" else None
    if channel is None:
        raise MalformedFeedError(f"Expected an RSS 2.0 document, got <{root.tag}>", source=source)
    return channel


def child_text(elem: ET.Element, path: str) -> str:
    """Stripped text of the first element matching ``path``, or ``""``."""
    found = elem.find(path, NS)
    if found is None or found.text is None:
        return ""
    return found.text.strip()


def child_attr(elem: ET.Element, path: str, attr: str) -> str:
    """Stripped attribute of the first element matching ``path``, or ``""``."""
    found = elem.find(path, NS)
    if found is None:
        return ""
    return (found.get(attr) or "").strip()


def sort_newest_first(items: list) -> tuple:
    """Order items by ``published_at`` descending, keeping document order on ties."""
    return tuple(sorted(items, key=lambda item: item.published_at, reverse=True))
