"""Timed, single-attempt HTTP fetcher for feed documents.

Provides the async client the cache store uses to pull feed XML and
the remote config document. One attempt per call, no retries.

Example:
    >>> from portalfeeds.http import FeedFetcher
    >>>
    >>> async with FeedFetcher(timeout=5.0) as fetcher:
    ...     response = await fetcher.fetch("https://example.com/feed.xml")
    ...     xml = response.content
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from portalfeeds.core.exceptions import FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResponse:
    """Raw upstream payload plus the hints the parser may need.

    Example:
        >>> from portalfeeds.http.fetcher import FetchResponse
        >>> r = FetchResponse(url="https://x/feed", content=b"<rss/>", content_type="text/xml")
        >>> r.status_code
        200
    """

    url: str
    content: bytes
    content_type: str = ""
    status_code: int = 200


class FeedFetcher:
    """Async HTTP client with a fixed per-request timeout.

    Features:
    - One attempt per call, bounded by ``timeout``
    - Redirects followed
    - Connection pooling across calls

    Non-2xx statuses, timeouts and transport errors all surface as
    :class:`~portalfeeds.core.exceptions.FetchError`.

    Attributes:
        timeout: Request timeout in seconds
        user_agent: User-Agent header value
    """

    def __init__(
        self,
        timeout: float = 5.0,
        user_agent: str = "portalfeeds/0.1",
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header
            headers: Additional default headers
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._timeout = timeout
        self._user_agent = user_agent
        self._extra_headers = headers or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def timeout(self) -> float:
        """Request timeout in seconds."""
        return self._timeout

    @property
    def user_agent(self) -> str:
        """User-Agent header value."""
        return self._user_agent

    @property
    def headers(self) -> dict[str, str]:
        """Default headers for requests."""
        return {
            "User-Agent": self._user_agent,
            "Accept-Encoding": "gzip, deflate",
            "Accept": "application/rss+xml, application/atom+xml, application/xml, */*",
            **self._extra_headers,
        }

    def _ensure_client(self) -> httpx.AsyncClient:
        """Get or create the pooled HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers=self.headers,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> FeedFetcher:
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def fetch(self, url: str, **kwargs: Any) -> FetchResponse:
        """GET ``url`` once.

        Args:
            url: Absolute URL to fetch
            **kwargs: Additional arguments for httpx (e.g. headers)

        Returns:
            The response body and content type.

        Raises:
            FetchError: On timeout, transport error or non-2xx status.
        """
        client = self._ensure_client()
        logger.debug("Fetching %s", url)

        try:
            # httpx timeouts are per phase; this bounds the whole request
            async with asyncio.timeout(self._timeout):
                response = await client.get(url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FetchError(f"HTTP {status} from {url}", url=url, status_code=status, cause=e) from e
        except (TimeoutError, httpx.TimeoutException) as e:
            raise FetchError(f"Request timeout after {self._timeout}s: {url}", url=url, cause=e) from e
        except httpx.RequestError as e:
            raise FetchError(f"Request failed: {e}", url=url, cause=e) from e

        return FetchResponse(
            url=str(response.url),
            content=response.content,
            content_type=response.headers.get("content-type", ""),
            status_code=response.status_code,
        )

    async def fetch_json(self, url: str, **kwargs: Any) -> Any:
        """GET ``url`` once and decode the body as JSON.

        Raises:
            FetchError: On any fetch failure or an undecodable body.
        """
        response = await self.fetch(url, **kwargs)
        try:
            return json.loads(response.content)
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}", url=url, cause=e) from e


__all__ = [
    "FeedFetcher",
    "FetchResponse",
]
