"""Tests for the article RSS parser."""

from datetime import UTC, datetime

import pytest

from portalfeeds.core.exceptions import MalformedFeedError
from portalfeeds.models.base import FeedKind
from portalfeeds.models.item import Post
from portalfeeds.parser import ArticleFeedParser, detect_feed_kind, parse_feed

FETCHED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def rss(*items: str) -> bytes:
    body = "".join(f"<item>{item}</item>" for item in items)
    return f'<rss version="2.0"><channel><title>Blog</title>{body}</channel></rss>'.encode()


class TestArticleFeedParser:
    def test_all_valid_items_parsed(self, blog_xml):
        feed = ArticleFeedParser().parse(blog_xml, FETCHED_AT)

        assert feed.kind is FeedKind.BLOG
        assert len(feed.items) == 3
        assert feed.skipped == 0
        assert all(isinstance(post, Post) for post in feed.items)

    def test_newest_first(self, blog_xml):
        feed = ArticleFeedParser().parse(blog_xml, FETCHED_AT)

        assert [post.slug for post in feed.items] == ["newest-post", "middle-post", "older-post"]
        dates = [post.published_at for post in feed.items]
        assert dates == sorted(dates, reverse=True)

    def test_content_encoded_sanitized(self, blog_xml):
        newest = ArticleFeedParser().parse(blog_xml, FETCHED_AT).items[0]

        assert "<script" not in newest.content
        assert "onclick" not in newest.content
        assert "Body" in newest.content
        assert newest.description == "Short"

    def test_image_from_content(self, blog_xml):
        newest = ArticleFeedParser().parse(blog_xml, FETCHED_AT).items[0]
        assert newest.image == "https://cdn.example.com/lead.png"

    def test_description_used_when_no_content(self, blog_xml):
        older = ArticleFeedParser().parse(blog_xml, FETCHED_AT).items[-1]

        assert older.description == "<p>Teaser</p>"
        assert older.content == older.description
        assert older.author == "Ada"
        assert older.guid == "post-1"

    def test_channel_metadata(self, blog_xml):
        channel = ArticleFeedParser().parse(blog_xml, FETCHED_AT).channel

        assert channel.title == "Field Notes"
        assert channel.link == "https://notes.example.com"
        assert channel.last_build_date == datetime(2026, 3, 1, 10, 0, tzinfo=UTC)

    def test_items_without_title_or_link_skipped(self):
        raw = rss(
            "<title>Good</title><link>https://b/p/good</link>",
            "<link>https://b/p/untitled</link>",
            "<title>No link</title>",
        )

        feed = ArticleFeedParser().parse(raw, FETCHED_AT)

        assert [post.title for post in feed.items] == ["Good"]
        assert feed.skipped == 2

    def test_duplicate_titles_get_distinct_slugs(self):
        raw = rss(
            "<title>Same</title><link>https://b/p/1</link><pubDate>Mon, 02 Feb 2026 09:00:00 GMT</pubDate>",
            "<title>Same</title><link>https://b/p/2</link><pubDate>Sun, 01 Feb 2026 09:00:00 GMT</pubDate>",
        )

        feed = ArticleFeedParser().parse(raw, FETCHED_AT)

        assert [post.slug for post in feed.items] == ["same", "same-2"]

    def test_slugs_stable_across_parses(self, blog_xml):
        first = ArticleFeedParser().parse(blog_xml, FETCHED_AT)
        second = ArticleFeedParser().parse(blog_xml, FETCHED_AT)

        assert [p.slug for p in first.items] == [p.slug for p in second.items]

    def test_missing_date_uses_fetch_time(self):
        feed = ArticleFeedParser().parse(rss("<title>A</title><link>https://b/p/a</link>"), FETCHED_AT)
        assert feed.items[0].published_at == FETCHED_AT

    def test_equal_dates_keep_document_order(self):
        date = "<pubDate>Mon, 02 Feb 2026 09:00:00 GMT</pubDate>"
        raw = rss(
            f"<title>First</title><link>https://b/p/1</link>{date}",
            f"<title>Second</title><link>https://b/p/2</link>{date}",
        )

        feed = ArticleFeedParser().parse(raw, FETCHED_AT)

        assert [post.title for post in feed.items] == ["First", "Second"]

    def test_empty_channel(self):
        feed = ArticleFeedParser().parse(rss(), FETCHED_AT)
        assert feed.items == ()

    @pytest.mark.parametrize(
        "raw",
        [b"", b"   ", b"<rss><channel>", b"not xml at all", b"<html><body/></html>"],
    )
    def test_malformed_document_raises(self, raw):
        with pytest.raises(MalformedFeedError):
            ArticleFeedParser().parse(raw, FETCHED_AT)


class TestParseFeedDispatch:
    def test_parse_feed_by_kind_name(self, blog_xml):
        feed = parse_feed("blog", blog_xml, fetched_at=FETCHED_AT)
        assert feed.kind is FeedKind.BLOG

    def test_unknown_kind(self, blog_xml):
        with pytest.raises(ValueError):
            parse_feed("newsletter", blog_xml)

    def test_detect_kinds(self, blog_xml, video_xml, podcast_xml):
        assert detect_feed_kind(blog_xml) is FeedKind.BLOG
        assert detect_feed_kind(video_xml) is FeedKind.VIDEO
        assert detect_feed_kind(podcast_xml) is FeedKind.PODCAST

    def test_detect_from_content_type(self):
        assert detect_feed_kind(b"", "application/atom+xml; charset=utf-8") is FeedKind.VIDEO
