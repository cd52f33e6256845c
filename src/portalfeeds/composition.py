"""Wiring of the process-wide objects.

Builds the fetcher, feed store, config resolver and service from
settings. Call once at process start and inject the result; tests
build isolated instances the same way.

Example:
    >>> from portalfeeds.composition import build_service
    >>> from portalfeeds.core.config import Settings
    >>> service = build_service(Settings(feed_ttl_seconds=60))
    >>> service.store.ttl_seconds
    60
"""

from __future__ import annotations

from portalfeeds.cache.memory import Clock
from portalfeeds.config.resolver import ConfigResolver
from portalfeeds.config.source import build_config_source
from portalfeeds.core.config import Settings, get_settings
from portalfeeds.http.fetcher import FeedFetcher
from portalfeeds.lookup import FeedService
from portalfeeds.store import FeedStore


def build_fetcher(settings: Settings) -> FeedFetcher:
    """Create the shared upstream fetcher."""
    return FeedFetcher(timeout=settings.fetch_timeout, user_agent=settings.user_agent)


def build_service(
    settings: Settings | None = None,
    fetcher: FeedFetcher | None = None,
    clock: Clock | None = None,
) -> FeedService:
    """Create a FeedService with an empty store.

    Args:
        settings: Environment settings (default: loaded from env).
        fetcher: Fetcher to share between feeds and config
            (default: one built from settings).
        clock: Source of the current time.
    """
    settings = settings or get_settings()
    fetcher = fetcher or build_fetcher(settings)
    store = FeedStore(fetcher, ttl_seconds=settings.feed_ttl_seconds, clock=clock)
    resolver = ConfigResolver(settings, build_config_source(settings, fetcher), clock=clock)
    return FeedService(store, resolver)
