"""Core configuration and exceptions."""

from portalfeeds.core.config import Settings, get_settings
from portalfeeds.core.exceptions import (
    ConfigUnavailableError,
    ConfigurationError,
    FetchError,
    MalformedFeedError,
    NotFoundError,
    PortalFeedsError,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Exceptions
    "PortalFeedsError",
    "FetchError",
    "MalformedFeedError",
    "NotFoundError",
    "ConfigUnavailableError",
    "ConfigurationError",
]
