"""Shared fixtures: a controllable clock, a scripted fetcher and sample feeds."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from portalfeeds.core.exceptions import FetchError
from portalfeeds.http.fetcher import FetchResponse

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeFetcher:
    """Fetcher serving canned bodies per URL.

    A value may be bytes (served), an exception (raised) or a list of
    those (consumed one per call, last one repeats).
    """

    def __init__(self, routes: dict | None = None, delay: float = 0.0) -> None:
        self.routes = dict(routes or {})
        self.delay = delay
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, url: str, **kwargs) -> FetchResponse:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if url not in self.routes:
            raise FetchError(f"HTTP 404 from {url}", url=url, status_code=404)
        outcome = self.routes[url]
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, Exception):
            raise outcome
        return FetchResponse(url=url, content=outcome)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def blog_xml() -> bytes:
    return b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Field Notes</title>
    <link>https://notes.example.com</link>
    <description>Essays</description>
    <lastBuildDate>Sun, 01 Mar 2026 10:00:00 GMT</lastBuildDate>
    <item>
      <title>Older Post</title>
      <link>https://notes.example.com/p/older-post</link>
      <guid>post-1</guid>
      <pubDate>Mon, 02 Feb 2026 09:00:00 GMT</pubDate>
      <description>&lt;p&gt;Teaser&lt;/p&gt;</description>
      <dc:creator>Ada</dc:creator>
    </item>
    <item>
      <title>Newest Post</title>
      <link>https://notes.example.com/p/newest-post</link>
      <guid>post-2</guid>
      <pubDate>Fri, 27 Feb 2026 09:00:00 GMT</pubDate>
      <description>Short</description>
      <content:encoded><![CDATA[<p onclick="steal()">Body<script>alert(1)</script></p><img src="https://cdn.example.com/lead.png">]]></content:encoded>
    </item>
    <item>
      <title>Middle Post</title>
      <link>https://notes.example.com/p/middle-post</link>
      <guid>post-3</guid>
      <pubDate>Sun, 15 Feb 2026 09:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>"""


@pytest.fixture
def video_xml() -> bytes:
    return b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom"
      xmlns:yt="http://www.youtube.com/xml/schemas/2015"
      xmlns:media="http://search.yahoo.com/mrss/">
  <title>Portal Channel</title>
  <link rel="alternate" href="https://www.youtube.com/channel/UC123"/>
  <updated>2026-02-28T10:00:00+00:00</updated>
  <entry>
    <id>yt:video:aaa111</id>
    <yt:videoId>aaa111</yt:videoId>
    <title>First Video</title>
    <link rel="alternate" href="https://www.youtube.com/watch?v=aaa111"/>
    <published>2026-02-01T10:00:00+00:00</published>
    <media:group>
      <media:thumbnail url="https://i.ytimg.com/vi/aaa111/hqdefault.jpg"/>
      <media:description>About the first video</media:description>
    </media:group>
  </entry>
  <entry>
    <id>yt:video:bbb222</id>
    <title>Second Video</title>
    <link rel="alternate" href="https://www.youtube.com/watch?v=bbb222"/>
    <published>2026-02-20T10:00:00+00:00</published>
  </entry>
</feed>"""


@pytest.fixture
def podcast_xml() -> bytes:
    return b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>Portal Podcast</title>
    <link>https://pod.example.com</link>
    <itunes:image href="https://pod.example.com/cover.jpg"/>
    <item>
      <title>Episode One</title>
      <guid>ep-guid-1</guid>
      <pubDate>Tue, 10 Feb 2026 06:00:00 GMT</pubDate>
      <enclosure url="https://pod.example.com/1.mp3" type="audio/mpeg" length="1"/>
      <itunes:duration>00:42:00</itunes:duration>
      <itunes:summary>First episode</itunes:summary>
    </item>
    <item>
      <title>Episode Two</title>
      <guid>ep-guid-2</guid>
      <pubDate>Tue, 24 Feb 2026 06:00:00 GMT</pubDate>
      <enclosure url="https://pod.example.com/2.mp3" type="audio/mpeg" length="1"/>
      <itunes:image href="https://pod.example.com/2.jpg"/>
    </item>
  </channel>
</rss>"""


@pytest.fixture
def make_fetcher():
    """Factory for scripted fetchers: ``make_fetcher({url: body}, delay=0.01)``."""
    return FakeFetcher
