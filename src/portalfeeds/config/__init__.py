"""Remote configuration resolution."""

from portalfeeds.config.resolver import CONFIG_KEY, ConfigResolver, merge_config
from portalfeeds.config.source import (
    ConfigSource,
    GitHubConfigSource,
    HttpConfigSource,
    build_config_source,
)

__all__ = [
    "CONFIG_KEY",
    "ConfigResolver",
    "ConfigSource",
    "GitHubConfigSource",
    "HttpConfigSource",
    "build_config_source",
    "merge_config",
]
