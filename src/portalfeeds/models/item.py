"""Canonical item models.

Every feed dialect converges on one of three item shapes, tagged by
``kind`` so a mixed list still serializes and validates unambiguously:

- `Post`: an article from the blog feed
- `Video`: an entry from the video channel feed
- `Podcast`: an episode from the podcast feed

Example:
    >>> from datetime import datetime, timezone
    >>> from portalfeeds.models.item import Post
    >>> post = Post(
    ...     title="Hello World",
    ...     link="https://example.com/p/hello-world",
    ...     published_at=datetime(2026, 1, 15, tzinfo=timezone.utc),
    ...     slug="hello-world",
    ... )
    >>> post.kind
    'blog'
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field

from portalfeeds.models.base import PortalModel


class ItemBase(PortalModel):
    """Fields shared by every canonical item."""

    title: str = Field(..., min_length=1, description="Entry title")
    link: str = Field(..., min_length=1, description="Canonical link to the entry")
    published_at: datetime = Field(..., description="Publication time (timezone-aware)")


class Post(ItemBase):
    """Article from the blog feed.

    ``content`` and ``description`` have been sanitized and may be
    rendered as trusted HTML.
    """

    kind: Literal["blog"] = "blog"
    slug: str = Field(..., min_length=1, description="URL-safe identifier, unique per snapshot")
    description: str = ""
    content: str = ""
    image: str | None = None
    author: str | None = None
    guid: str | None = None


class Video(ItemBase):
    """Entry from the video channel feed.

    Example:
        >>> from datetime import datetime, timezone
        >>> from portalfeeds.models.item import Video
        >>> Video(
        ...     id="dQw4w9WgXcQ",
        ...     title="A video",
        ...     link="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        ...     published_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        ... ).id
        'dQw4w9WgXcQ'
    """

    kind: Literal["video"] = "video"
    id: str = Field(..., min_length=1, description="Upstream platform video id")
    description: str | None = None
    thumbnail: str | None = None


class Podcast(ItemBase):
    """Episode from the podcast feed.

    Looked up by ``guid`` or, transparently, by ``slug``.
    """

    kind: Literal["podcast"] = "podcast"
    guid: str = Field(..., min_length=1, description="Feed-provided unique identifier")
    slug: str = Field(..., min_length=1)
    description: str | None = None
    audio_url: str = Field(..., min_length=1)
    duration: str | None = None
    image: str | None = None


CanonicalItem = Annotated[Post | Video | Podcast, Field(discriminator="kind")]


class ChannelMetadata(PortalModel):
    """Channel-level information of a parsed feed."""

    title: str = ""
    link: str = ""
    description: str = ""
    last_build_date: datetime | None = None
