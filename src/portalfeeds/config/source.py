"""Remote configuration document sources.

The portal's ``config.json`` lives either in a GitHub repository (read
through the contents API) or behind a plain URL. A source returns the
decoded document, ``None`` when no document exists yet, or raises
:class:`~portalfeeds.core.exceptions.ConfigUnavailableError`.

Example:
    >>> from portalfeeds.config.source import build_config_source
    >>> from portalfeeds.core.config import Settings
    >>> from portalfeeds.http import FeedFetcher
    >>> build_config_source(Settings(), FeedFetcher()) is None
    True
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Protocol, runtime_checkable

from portalfeeds.core.config import Settings
from portalfeeds.core.exceptions import ConfigUnavailableError, FetchError
from portalfeeds.http.fetcher import FeedFetcher

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


@runtime_checkable
class ConfigSource(Protocol):
    """Protocol for remote config document sources."""

    async def load(self) -> dict[str, Any] | None:
        """Return the config document, or None if none exists."""
        ...


def _as_document(value: Any, origin: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigUnavailableError(f"Config document from {origin} is not a JSON object")
    return value


class GitHubConfigSource:
    """Reads ``config.json`` from a GitHub repository.

    Example:
        >>> from portalfeeds.config.source import GitHubConfigSource
        >>> source = GitHubConfigSource(fetcher=None, owner="me", repo="site", token="t")
        >>> source.url
        'https://api.github.com/repos/me/site/contents/config.json'
    """

    def __init__(
        self,
        fetcher: FeedFetcher,
        owner: str,
        repo: str,
        token: str,
        branch: str = "main",
        path: str = "config.json",
    ) -> None:
        self._fetcher = fetcher
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.path = path
        self._token = token

    @property
    def url(self) -> str:
        """Contents API URL of the document."""
        return f"{GITHUB_API_URL}/repos/{self.owner}/{self.repo}/contents/{self.path}"

    async def load(self) -> dict[str, Any] | None:
        """Fetch and decode the document.

        Raises:
            ConfigUnavailableError: If GitHub fails or the payload is not
                a base64-encoded JSON object.
        """
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github.v3+json",
        }
        try:
            payload = await self._fetcher.fetch_json(self.url, headers=headers, params={"ref": self.branch})
        except FetchError as e:
            if e.status_code == 404:
                logger.info("No %s in %s/%s yet", self.path, self.owner, self.repo)
                return None
            raise ConfigUnavailableError(f"GitHub API error: {e}", cause=e) from e

        try:
            encoded = _as_document(payload, "GitHub")["content"]
            content = base64.b64decode("".join(encoded.split()))
            return _as_document(json.loads(content), self.url)
        except (KeyError, AttributeError, binascii.Error, ValueError) as e:
            raise ConfigUnavailableError(f"Unreadable {self.path} from GitHub: {e}", cause=e) from e


class HttpConfigSource:
    """Reads the config document from a plain JSON URL."""

    def __init__(self, fetcher: FeedFetcher, url: str) -> None:
        self._fetcher = fetcher
        self.url = url

    async def load(self) -> dict[str, Any] | None:
        """Fetch the document.

        Raises:
            ConfigUnavailableError: On fetch failure or a non-object body.
        """
        try:
            payload = await self._fetcher.fetch_json(self.url)
        except FetchError as e:
            if e.status_code == 404:
                return None
            raise ConfigUnavailableError(f"Config fetch failed: {e}", cause=e) from e
        return _as_document(payload, self.url)


def build_config_source(settings: Settings, fetcher: FeedFetcher) -> ConfigSource | None:
    """Pick the config source the deployment is set up for.

    A plain ``config_url`` wins; otherwise GitHub is used when owner,
    repo and token are all known. Returns None when neither is set.
    """
    if settings.config_url:
        return HttpConfigSource(fetcher, settings.config_url)

    github = settings.github_settings()
    if github["owner"] and github["repo"] and github["token"]:
        return GitHubConfigSource(
            fetcher,
            owner=github["owner"],
            repo=github["repo"],
            token=github["token"],
            branch=github["branch"] or "main",
        )
    return None
