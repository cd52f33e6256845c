"""Custom exceptions.

portalfeeds uses a small hierarchy of exceptions so callers can tell
recoverable upstream trouble from genuine lookups that miss:

Example:
    >>> from portalfeeds.core.exceptions import FetchError, NotFoundError, PortalFeedsError
    >>> isinstance(FetchError("timeout"), PortalFeedsError)
    True
    >>> try:
    ...     raise NotFoundError("post abc")
    ... except PortalFeedsError as e:
    ...     print(f"Caught: {type(e).__name__}")
    Caught: NotFoundError
"""

from __future__ import annotations


class PortalFeedsError(Exception):
    """Base exception for portalfeeds.

    Example:
        >>> from portalfeeds.core.exceptions import PortalFeedsError
        >>> e = PortalFeedsError("something went wrong")
        >>> str(e)
        'something went wrong'
    """


class FetchError(PortalFeedsError):
    """Upstream fetch failed (network error, timeout or non-2xx status).

    Example:
        >>> from portalfeeds.core.exceptions import FetchError
        >>> err = FetchError("HTTP 503", url="https://example.com/feed")
        >>> err.url
        'https://example.com/feed'
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class MalformedFeedError(PortalFeedsError):
    """Feed document could not be parsed for the expected dialect.

    Example:
        >>> from portalfeeds.core.exceptions import MalformedFeedError
        >>> err = MalformedFeedError("not XML", source="video")
        >>> err.source
        'video'
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.cause = cause


class NotFoundError(PortalFeedsError):
    """Requested item not found in the cached feed.

    Example:
        >>> from portalfeeds.core.exceptions import NotFoundError
        >>> raise NotFoundError("post abc")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        NotFoundError: post abc
    """


class ConfigUnavailableError(PortalFeedsError):
    """Remote configuration document could not be read.

    Example:
        >>> from portalfeeds.core.exceptions import ConfigUnavailableError
        >>> raise ConfigUnavailableError("GitHub API 500")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ConfigUnavailableError: GitHub API 500
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigurationError(PortalFeedsError):
    """Local configuration is invalid.

    Example:
        >>> from portalfeeds.core.exceptions import ConfigurationError
        >>> raise ConfigurationError("unknown feed kind")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ConfigurationError: unknown feed kind
    """
