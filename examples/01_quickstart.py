#!/usr/bin/env python3
"""
portalfeeds Quickstart Example

Shows the basic flow: configure feeds, read through the cache, look items up.

Usage:
    PORTAL_BLOG_FEED_URL=https://example.substack.com/feed \
    PORTAL_PODCAST_FEED_URL=https://example.com/podcast.xml \
    python examples/01_quickstart.py
"""

import asyncio

from portalfeeds import FeedKind, build_service


async def main() -> None:
    """Read the blog and podcast feeds twice; the second read is cached."""

    service = build_service()
    try:
        print("First read (fetches upstream)...")
        posts = await service.list_items(FeedKind.BLOG, limit=5)
        for post in posts:
            print(f"  {post.published_at:%Y-%m-%d}  {post.slug}")

        print("\nSecond read (served from cache)...")
        snapshot = await service.snapshot(FeedKind.BLOG)
        if snapshot is not None:
            print(f"  {len(snapshot.items)} posts fetched at {snapshot.fetched_at:%H:%M:%S}, fresh={snapshot.fresh}")

        episodes = await service.list_items(FeedKind.PODCAST, limit=1)
        if episodes:
            latest = episodes[0]
            same = await service.find_by_guid_or_slug(FeedKind.PODCAST, latest.slug)
            print(f"\nLatest episode {latest.title!r} found by slug: {same.guid == latest.guid}")
    finally:
        await service.store.close()


if __name__ == "__main__":
    asyncio.run(main())
