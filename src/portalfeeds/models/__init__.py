"""Pydantic models for portalfeeds."""

from portalfeeds.models.base import FeedKind, PortalModel
from portalfeeds.models.config import FeedConfig, SeoConfig
from portalfeeds.models.item import (
    CanonicalItem,
    ChannelMetadata,
    ItemBase,
    Podcast,
    Post,
    Video,
)

__all__ = [
    # Base
    "FeedKind",
    "PortalModel",
    # Items
    "CanonicalItem",
    "ChannelMetadata",
    "ItemBase",
    "Post",
    "Video",
    "Podcast",
    # Config
    "FeedConfig",
    "SeoConfig",
]
