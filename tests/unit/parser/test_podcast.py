"""Tests for the podcast RSS parser."""

from datetime import UTC, datetime

import pytest

from portalfeeds.core.exceptions import MalformedFeedError
from portalfeeds.models.base import FeedKind
from portalfeeds.parser.podcast import PodcastFeedParser

FETCHED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

AUDIO = '<enclosure url="https://pod/{n}.mp3" type="audio/mpeg"/>'


def podcast(*items: str) -> bytes:
    body = "".join(f"<item>{item}</item>" for item in items)
    return (
        '<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">'
        f"<channel><title>Pod</title>{body}</channel></rss>"
    ).encode()


class TestPodcastFeedParser:
    def test_episodes_parsed_newest_first(self, podcast_xml):
        feed = PodcastFeedParser().parse(podcast_xml, FETCHED_AT)

        assert feed.kind is FeedKind.PODCAST
        assert [episode.guid for episode in feed.items] == ["ep-guid-2", "ep-guid-1"]
        assert [episode.slug for episode in feed.items] == ["episode-two", "episode-one"]

    def test_episode_fields(self, podcast_xml):
        one = PodcastFeedParser().parse(podcast_xml, FETCHED_AT).items[-1]

        assert one.audio_url == "https://pod.example.com/1.mp3"
        assert one.link == "https://pod.example.com/1.mp3"
        assert one.duration == "00:42:00"
        assert one.description == "First episode"

    def test_image_falls_back_to_channel(self, podcast_xml):
        two, one = PodcastFeedParser().parse(podcast_xml, FETCHED_AT).items

        assert two.image == "https://pod.example.com/2.jpg"
        assert one.image == "https://pod.example.com/cover.jpg"

    def test_guid_falls_back_to_audio_url(self):
        feed = PodcastFeedParser().parse(podcast(f"<title>No guid</title>{AUDIO.format(n=1)}"), FETCHED_AT)
        assert feed.items[0].guid == "https://pod/1.mp3"

    def test_items_without_audio_skipped(self):
        raw = podcast(
            f"<title>Has audio</title><guid>g1</guid>{AUDIO.format(n=1)}",
            "<title>No audio</title><guid>g2</guid><link>https://pod/ep2</link>",
        )

        feed = PodcastFeedParser().parse(raw, FETCHED_AT)

        assert [episode.guid for episode in feed.items] == ["g1"]
        assert feed.skipped == 1

    def test_duplicate_guids_skipped(self):
        raw = podcast(
            f"<title>A</title><guid>same</guid>{AUDIO.format(n=1)}",
            f"<title>B</title><guid>same</guid>{AUDIO.format(n=2)}",
        )

        feed = PodcastFeedParser().parse(raw, FETCHED_AT)

        assert [episode.title for episode in feed.items] == ["A"]

    def test_dropped_duplicate_does_not_consume_slug(self):
        raw = podcast(
            f"<title>Same</title><guid>g1</guid>{AUDIO.format(n=1)}",
            f"<title>Same</title><guid>g1</guid>{AUDIO.format(n=2)}",
            f"<title>Same</title><guid>g2</guid>{AUDIO.format(n=3)}",
        )

        feed = PodcastFeedParser().parse(raw, FETCHED_AT)

        assert sorted(episode.slug for episode in feed.items) == ["same", "same-2"]
        assert feed.skipped == 1

    def test_untitled_slug_fallback(self):
        raw = podcast(
            f"<itunes:title>ç</itunes:title><guid>日本</guid>{AUDIO.format(n=1)}",
        )

        feed = PodcastFeedParser().parse(raw, FETCHED_AT)

        assert feed.items[0].slug == "c"

    def test_description_sanitized(self):
        raw = podcast(
            f"<title>T</title><description>&lt;b onmouseover='x()'&gt;Hi&lt;/b&gt;</description>{AUDIO.format(n=1)}",
        )

        feed = PodcastFeedParser().parse(raw, FETCHED_AT)

        assert feed.items[0].description == "<b>Hi</b>"

    @pytest.mark.parametrize("raw", [b"", b"<rss>", b"<feed/>"])
    def test_malformed_document_raises(self, raw):
        with pytest.raises(MalformedFeedError):
            PodcastFeedParser().parse(raw, FETCHED_AT)
