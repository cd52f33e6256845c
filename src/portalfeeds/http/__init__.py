"""portalfeeds HTTP utilities.

Provides the single-attempt, timeout-bounded fetcher used for feed
documents and the remote config document.

Example:
    >>> from portalfeeds.http import FeedFetcher
    >>>
    >>> async with FeedFetcher(timeout=5.0) as fetcher:
    ...     response = await fetcher.fetch("https://example.com/feed.xml")
"""

from portalfeeds.http.fetcher import FeedFetcher, FetchResponse

__all__ = [
    "FeedFetcher",
    "FetchResponse",
]
