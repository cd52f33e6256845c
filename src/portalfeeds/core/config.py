"""portalfeeds configuration.

Application settings loaded from environment variables with PORTAL_ prefix.
These are the environment-level defaults; the remote config document
resolved by :mod:`portalfeeds.config.resolver` takes precedence per field.

Example:
    >>> from portalfeeds.core.config import get_settings
    >>> settings = get_settings(log_level="DEBUG")
    >>> settings.log_level
    'DEBUG'
    >>> settings.feed_ttl_seconds
    180
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings.

    Loads from environment variables with PORTAL_ prefix.

    Example:
        >>> from portalfeeds.core.config import Settings
        >>> s = Settings(blog_feed_url="https://example.substack.com/feed")
        >>> s.blog_feed_url
        'https://example.substack.com/feed'
        >>> s.fetch_timeout
        5.0
    """

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Feed defaults
    blog_feed_url: str | None = Field(default=None, description="Default blog/article RSS URL")
    youtube_feed_url: str | None = Field(default=None, description="Default video Atom URL")
    podcast_feed_url: str | None = Field(default=None, description="Default podcast RSS URL")

    # Cache
    feed_ttl_seconds: int = Field(default=180, ge=0, description="Feed cache TTL")
    config_ttl_seconds: int = Field(default=180, ge=0, description="Remote config cache TTL")

    # Fetching
    fetch_timeout: float = Field(default=5.0, gt=0.0, description="Upstream fetch timeout")
    user_agent: str = Field(default="portalfeeds/0.1")

    # Remote config document
    config_url: str | None = Field(default=None, description="Plain JSON config document URL")
    github_user: str | None = None
    github_repo: str | None = None
    github_token: str | None = None
    github_branch: str = "main"
    github_config: str | None = Field(
        default=None,
        description="JSON blob with owner/repo/token/branch, used when the split fields are unset",
    )

    # Site
    site_name: str = "WebSuite CMS"
    author: str = "Admin"
    meta_title: str = ""
    meta_description: str = ""
    meta_keywords: str = ""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    def github_settings(self) -> dict[str, str | None]:
        """Return owner/repo/token/branch for the GitHub config source.

        The split ``PORTAL_GITHUB_*`` fields win; missing ones are filled
        from the ``PORTAL_GITHUB_CONFIG`` JSON blob.

        Example:
            >>> from portalfeeds.core.config import Settings
            >>> s = Settings(github_config='{"owner": "me", "repo": "site", "token": "t"}')
            >>> s.github_settings()["repo"]
            'site'
        """
        blob: dict[str, Any] = {}
        if not (self.github_user and self.github_repo and self.github_token) and self.github_config:
            try:
                blob = json.loads(self.github_config)
            except ValueError:
                logger.error("PORTAL_GITHUB_CONFIG is not valid JSON, ignoring it")
            if not isinstance(blob, dict):
                blob = {}

        branch = self.github_branch
        if "github_branch" not in self.model_fields_set:
            branch = blob.get("branch") or branch

        return {
            "owner": self.github_user or blob.get("owner"),
            "repo": self.github_repo or blob.get("repo"),
            "token": self.github_token or blob.get("token"),
            "branch": branch,
        }


def get_settings(**overrides: Any) -> Settings:
    """Get settings with optional overrides.

    Example:
        >>> from portalfeeds.core.config import get_settings
        >>> s = get_settings(feed_ttl_seconds=60)
        >>> s.feed_ttl_seconds
        60
    """
    return Settings(**overrides)
