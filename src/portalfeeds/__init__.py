"""
portalfeeds - Feed Cache and Normalization for a Content Portal.

portalfeeds fetches the portal's three upstream feeds, normalizes them
into canonical items and serves them from a process-wide cache.

Key Features:
- One parser per dialect (article RSS, video Atom, podcast RSS)
- Deterministic, collision-free slugs
- HTML sanitization of upstream descriptions
- TTL cache with single-flight refresh and stale-on-error fallback
- Remote config document with field-level environment fallback

Quick Start:
    >>> from portalfeeds import build_service
    >>> service = build_service()
    >>> posts = await service.list_items("blog", limit=6)
    >>> episode = await service.find_by_guid_or_slug("podcast", "episode-1")

Architecture:
    Fetching: FeedFetcher
    Parsers: ArticleFeedParser, VideoFeedParser, PodcastFeedParser
    Caching: MemoryCache, FeedStore
    Config: ConfigResolver, GitHubConfigSource, HttpConfigSource
    Lookups: FeedService
"""

from portalfeeds.cache.memory import CacheResult, MemoryCache
from portalfeeds.composition import build_fetcher, build_service
from portalfeeds.config.resolver import ConfigResolver, merge_config
from portalfeeds.config.source import GitHubConfigSource, HttpConfigSource
from portalfeeds.core.config import Settings, get_settings
from portalfeeds.core.exceptions import (
    ConfigUnavailableError,
    ConfigurationError,
    FetchError,
    MalformedFeedError,
    NotFoundError,
    PortalFeedsError,
)
from portalfeeds.http.fetcher import FeedFetcher, FetchResponse
from portalfeeds.lookup import FeedService
from portalfeeds.models.base import FeedKind
from portalfeeds.models.config import FeedConfig, SeoConfig
from portalfeeds.models.item import ChannelMetadata, Podcast, Post, Video
from portalfeeds.parser import (
    ArticleFeedParser,
    PodcastFeedParser,
    VideoFeedParser,
    detect_feed_kind,
    parse_feed,
)
from portalfeeds.store import FeedSnapshot, FeedStore

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Wiring
    "build_fetcher",
    "build_service",
    # Fetching
    "FeedFetcher",
    "FetchResponse",
    # Parsers
    "ArticleFeedParser",
    "VideoFeedParser",
    "PodcastFeedParser",
    "detect_feed_kind",
    "parse_feed",
    # Caching
    "CacheResult",
    "MemoryCache",
    "FeedSnapshot",
    "FeedStore",
    # Config
    "ConfigResolver",
    "GitHubConfigSource",
    "HttpConfigSource",
    "merge_config",
    "Settings",
    "get_settings",
    # Lookups
    "FeedService",
    # Models
    "FeedKind",
    "Post",
    "Video",
    "Podcast",
    "ChannelMetadata",
    "FeedConfig",
    "SeoConfig",
    # Exceptions
    "PortalFeedsError",
    "FetchError",
    "MalformedFeedError",
    "NotFoundError",
    "ConfigUnavailableError",
    "ConfigurationError",
]
