"""Base models and shared types.

This module provides the foundational model config and enums used
throughout portalfeeds.

Example:
    >>> from portalfeeds.models.base import FeedKind
    >>> FeedKind.VIDEO.value
    'video'
    >>> FeedKind("podcast")
    <FeedKind.PODCAST: 'podcast'>
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class FeedKind(str, Enum):
    """The three upstream feeds a portal republishes.

    The kind selects the parser dialect and the canonical item shape.

    Example:
        >>> list(FeedKind)
        [<FeedKind.BLOG: 'blog'>, <FeedKind.VIDEO: 'video'>, <FeedKind.PODCAST: 'podcast'>]
    """

    BLOG = "blog"  # RSS 2.0 articles
    VIDEO = "video"  # Atom (YouTube channel feed)
    PODCAST = "podcast"  # RSS with audio enclosures


class PortalModel(BaseModel):
    """Base model with standard configuration.

    Models are frozen: a cached snapshot is shared by every request that
    reads it, so nothing may mutate it in place.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
        extra="forbid",
    )
