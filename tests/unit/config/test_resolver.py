"""Tests for remote config sources and the config resolver."""

import base64
import json

import httpx
import pytest

from portalfeeds.config.resolver import ConfigResolver, merge_config
from portalfeeds.config.source import GitHubConfigSource, HttpConfigSource, build_config_source
from portalfeeds.core.config import Settings
from portalfeeds.core.exceptions import ConfigUnavailableError
from portalfeeds.http.fetcher import FeedFetcher


def env(**overrides) -> Settings:
    defaults = {
        "blog_feed_url": "https://env/blog",
        "youtube_feed_url": "https://env/videos",
        "podcast_feed_url": "https://env/podcast",
        "site_name": "Env Site",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


class StaticSource:
    """Config source returning scripted documents or errors."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def load(self):
        self.calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def github_payload(document: dict) -> dict:
    encoded = base64.b64encode(json.dumps(document).encode()).decode()
    # GitHub wraps base64 content at 60 columns
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
    return {"content": wrapped, "encoding": "base64"}


# =============================================================================
# merge_config
# =============================================================================


class TestMergeConfig:
    def test_empty_document_uses_env(self):
        config = merge_config({}, env())

        assert config.blog_feed_url == "https://env/blog"
        assert config.video_feed_url == "https://env/videos"
        assert config.podcast_feed_url == "https://env/podcast"
        assert config.site_name == "Env Site"

    def test_fields_fall_back_individually(self):
        config = merge_config({"feeds": {"podcast": "https://remote/podcast"}}, env())

        assert config.podcast_feed_url == "https://remote/podcast"
        assert config.blog_feed_url == "https://env/blog"
        assert config.video_feed_url == "https://env/videos"

    def test_flat_keys(self):
        document = {
            "blogRssUrl": "https://remote/blog",
            "youtubeRssUrl": "https://remote/videos",
            "podcastFeedUrl": "https://remote/podcast",
            "siteName": "Remote",
            "seo": {"metaTitle": "T", "metaKeywords": "a,b"},
        }

        config = merge_config(document, env(meta_description="env description"))

        assert config.blog_feed_url == "https://remote/blog"
        assert config.video_feed_url == "https://remote/videos"
        assert config.site_name == "Remote"
        assert config.seo.meta_title == "T"
        assert config.seo.meta_keywords == "a,b"
        assert config.seo.meta_description == "env description"

    def test_nested_feeds_win_over_flat_keys(self):
        document = {"feeds": {"blog": "https://nested"}, "blogRssUrl": "https://flat"}
        assert merge_config(document, env()).blog_feed_url == "https://nested"

    def test_blank_values_ignored(self):
        config = merge_config({"feeds": {"blog": "  "}, "siteName": ""}, env())

        assert config.blog_feed_url == "https://env/blog"
        assert config.site_name == "Env Site"

    def test_non_object_groups_ignored(self):
        config = merge_config({"feeds": ["https://x"], "seo": "nope"}, env())
        assert config.blog_feed_url == "https://env/blog"

    def test_unset_feed_stays_none(self):
        config = merge_config({}, env(podcast_feed_url=None))
        assert config.podcast_feed_url is None


# =============================================================================
# ConfigResolver
# =============================================================================


class TestConfigResolver:
    async def test_no_source_uses_env(self):
        resolver = ConfigResolver(env(), source=None)

        config = await resolver.resolve()

        assert config.blog_feed_url == "https://env/blog"

    async def test_document_cached_within_ttl(self, clock):
        source = StaticSource({"feeds": {"blog": "https://remote/blog"}})
        resolver = ConfigResolver(env(), source, ttl_seconds=180, clock=clock)

        await resolver.resolve()
        clock.advance(100)
        config = await resolver.resolve()

        assert config.blog_feed_url == "https://remote/blog"
        assert source.calls == 1

    async def test_document_reloaded_after_ttl(self, clock):
        source = StaticSource({"feeds": {"blog": "https://one"}}, {"feeds": {"blog": "https://two"}})
        resolver = ConfigResolver(env(), source, ttl_seconds=180, clock=clock)

        await resolver.resolve()
        clock.advance(181)
        config = await resolver.resolve()

        assert config.blog_feed_url == "https://two"

    async def test_unreachable_source_uses_env(self, clock):
        source = StaticSource(ConfigUnavailableError("GitHub API 500"))
        resolver = ConfigResolver(env(), source, clock=clock)

        config = await resolver.resolve()

        assert config.blog_feed_url == "https://env/blog"
        assert config.podcast_feed_url == "https://env/podcast"

    async def test_failed_reload_keeps_previous_document(self, clock):
        source = StaticSource({"feeds": {"blog": "https://remote"}}, ConfigUnavailableError("down"))
        resolver = ConfigResolver(env(), source, ttl_seconds=180, clock=clock)

        await resolver.resolve()
        clock.advance(200)
        config = await resolver.resolve()

        assert config.blog_feed_url == "https://remote"

    async def test_missing_document_uses_env(self, clock):
        resolver = ConfigResolver(env(), StaticSource(None), clock=clock)

        config = await resolver.resolve()

        assert config.video_feed_url == "https://env/videos"

    async def test_force_refresh(self, clock):
        source = StaticSource({"siteName": "One"}, {"siteName": "Two"})
        resolver = ConfigResolver(env(), source, ttl_seconds=180, clock=clock)

        await resolver.resolve()
        config = await resolver.resolve(force_refresh=True)

        assert config.site_name == "Two"


# =============================================================================
# Sources
# =============================================================================


class TestGitHubConfigSource:
    async def test_decodes_contents_api_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            seen["ref"] = request.url.params["ref"]
            seen["path"] = request.url.path
            return httpx.Response(200, json=github_payload({"feeds": {"podcast": "https://remote/pod"}}))

        fetcher = FeedFetcher(transport=httpx.MockTransport(handler))
        source = GitHubConfigSource(fetcher, owner="me", repo="site", token="tok", branch="live")

        document = await source.load()
        await fetcher.close()

        assert document == {"feeds": {"podcast": "https://remote/pod"}}
        assert seen == {"auth": "Bearer tok", "ref": "live", "path": "/repos/me/site/contents/config.json"}

    async def test_missing_file_is_none(self):
        fetcher = FeedFetcher(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
        source = GitHubConfigSource(fetcher, owner="me", repo="site", token="tok")

        assert await source.load() is None

    async def test_server_error_is_unavailable(self):
        fetcher = FeedFetcher(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
        source = GitHubConfigSource(fetcher, owner="me", repo="site", token="tok")

        with pytest.raises(ConfigUnavailableError):
            await source.load()

    async def test_garbage_content_is_unavailable(self):
        fetcher = FeedFetcher(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"content": "!!!not base64"}))
        )
        source = GitHubConfigSource(fetcher, owner="me", repo="site", token="tok")

        with pytest.raises(ConfigUnavailableError):
            await source.load()


class TestHttpConfigSource:
    async def test_loads_document(self):
        fetcher = FeedFetcher(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"siteName": "Remote"}))
        )

        assert await HttpConfigSource(fetcher, "https://cfg/config.json").load() == {"siteName": "Remote"}

    async def test_non_object_is_unavailable(self):
        fetcher = FeedFetcher(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[1, 2])))

        with pytest.raises(ConfigUnavailableError):
            await HttpConfigSource(fetcher, "https://cfg/config.json").load()


class TestBuildConfigSource:
    def test_none_without_settings(self):
        assert build_config_source(Settings(_env_file=None), FeedFetcher()) is None

    def test_config_url_wins(self):
        settings = Settings(_env_file=None, config_url="https://cfg", github_user="me", github_repo="r", github_token="t")
        assert isinstance(build_config_source(settings, FeedFetcher()), HttpConfigSource)

    def test_github_from_json_blob(self):
        settings = Settings(_env_file=None, github_config='{"owner": "me", "repo": "site", "token": "t", "branch": "dev"}')

        source = build_config_source(settings, FeedFetcher())

        assert isinstance(source, GitHubConfigSource)
        assert (source.owner, source.repo, source.branch) == ("me", "site", "dev")

    def test_incomplete_github_settings(self):
        settings = Settings(_env_file=None, github_user="me", github_repo="site")
        assert build_config_source(settings, FeedFetcher()) is None
