"""FastAPI integration for portalfeeds.

Provides the JSON/HTML API the dashboard and public site consume:
- Post, video and podcast lists with pagination and forced refresh
- Single-item lookups by slug, video id, or podcast guid/slug
- Site metadata and health checks
- OpenAPI documentation

Example:
    >>> from portalfeeds.api.fastapi import create_app
    >>> from portalfeeds.composition import build_service
    >>>
    >>> app = create_app(build_service())
    >>>
    >>> # Run with: uvicorn portalfeeds.api.fastapi:app
"""

from __future__ import annotations

import logging
from html import escape
from typing import Any

from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.responses import HTMLResponse, Response

from portalfeeds.core.exceptions import FetchError, MalformedFeedError, NotFoundError
from portalfeeds.lookup import FeedService
from portalfeeds.models.base import FeedKind
from portalfeeds.models.item import Post

logger = logging.getLogger(__name__)

DEFAULT_HTMX_PAGE_SIZE = 6


def render_post_cards(posts: list[Post]) -> str:
    """Render posts as the HTML cards a "load more" request expects.

    Example:
        >>> from datetime import UTC, datetime
        >>> from portalfeeds.models.item import Post
        >>> post = Post(title="A & B", link="https://b/p/ab", slug="a-b", published_at=datetime.now(UTC))
        >>> render_post_cards([post])
        '<div class="p-4 border rounded"><a href="/post/a-b">A &amp; B</a></div>'
    """
    return "".join(
        f'<div class="p-4 border rounded"><a href="/post/{escape(post.slug)}">{escape(post.title)}</a></div>'
        for post in posts
    )


def create_app(
    service: FeedService,
    title: str = "portalfeeds API",
    version: str = "0.1.0",
    description: str = "Cached, normalized blog, video and podcast feeds",
) -> FastAPI:
    """Create a FastAPI application over a FeedService.

    Args:
        service: Feed service (store + config resolver) for this process.
        title: API title for OpenAPI docs.
        version: API version.
        description: API description for docs.

    Returns:
        Configured FastAPI application.

    Example:
        >>> from portalfeeds.api.fastapi import create_app
        >>> from portalfeeds.composition import build_service
        >>> app = create_app(build_service())
        >>> app.title
        'portalfeeds API'
    """
    app = FastAPI(
        title=title,
        version=version,
        description=description,
    )

    app.state.service = service

    # =========================================================================
    # Lifecycle Events
    # =========================================================================

    @app.on_event("shutdown")
    async def shutdown() -> None:
        """Close upstream connections on shutdown."""
        await app.state.service.store.close()

    # =========================================================================
    # Health & Info Endpoints
    # =========================================================================

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/api/metadata")
    async def metadata() -> dict[str, Any]:
        """Site settings, active feed URLs and blog channel info."""
        config = await app.state.service.config()
        channel = None
        try:
            snapshot = await app.state.service.snapshot(FeedKind.BLOG)
        except (FetchError, MalformedFeedError) as e:
            logger.warning("Blog channel metadata unavailable: %s", e)
            snapshot = None
        if snapshot is not None:
            channel = snapshot.channel.model_dump(mode="json")

        return {
            "config": config.model_dump(mode="json"),
            "channel": channel,
        }

    # =========================================================================
    # Posts Endpoints
    # =========================================================================

    @app.get("/api/posts", response_model=None)
    async def list_posts(
        refresh: bool = Query(False, description="Bypass the cache TTL"),
        offset: int = Query(0, ge=0, description="Skip posts"),
        limit: int | None = Query(None, ge=1, le=100, description="Max posts to return"),
        hx_request: str | None = Header(None, alias="HX-Request"),
    ) -> Response | list[dict[str, Any]]:
        """List posts newest first; HTML cards for HTMX "load more" requests."""
        is_htmx = hx_request == "true"
        if is_htmx and limit is None:
            limit = DEFAULT_HTMX_PAGE_SIZE

        try:
            posts = await app.state.service.list_items(
                FeedKind.BLOG,
                force_refresh=refresh,
                offset=offset,
                limit=limit,
            )
        except (FetchError, MalformedFeedError) as e:
            raise HTTPException(status_code=502, detail=str(e)) from e

        if is_htmx:
            if not posts:
                return Response(status_code=204)
            return HTMLResponse(render_post_cards(posts))
        return [post.model_dump(mode="json") for post in posts]

    @app.get("/api/post/{slug}")
    async def get_post(slug: str) -> dict[str, Any]:
        """Get a post by slug."""
        try:
            post = await app.state.service.find_by_slug(FeedKind.BLOG, slug)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail="Post not found") from e
        except (FetchError, MalformedFeedError) as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        result: dict[str, Any] = post.model_dump(mode="json")
        return result

    # =========================================================================
    # Video Endpoints
    # =========================================================================

    @app.get("/api/videos")
    async def list_videos(
        refresh: bool = Query(False, description="Bypass the cache TTL"),
        offset: int = Query(0, ge=0, description="Skip videos"),
        limit: int | None = Query(None, ge=1, le=100, description="Max videos to return"),
    ) -> list[dict[str, Any]]:
        """List videos newest first; empty when the feed is unavailable."""
        try:
            videos = await app.state.service.list_items(
                FeedKind.VIDEO,
                force_refresh=refresh,
                offset=offset,
                limit=limit,
            )
        except (FetchError, MalformedFeedError) as e:
            logger.error("Video feed unavailable: %s", e)
            return []
        return [video.model_dump(mode="json") for video in videos]

    @app.get("/api/video/{video_id}")
    async def get_video(video_id: str) -> dict[str, Any]:
        """Get a video by platform id."""
        try:
            video = await app.state.service.find_by_id(FeedKind.VIDEO, video_id)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail="Video not found") from e
        except (FetchError, MalformedFeedError) as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        result: dict[str, Any] = video.model_dump(mode="json")
        return result

    # =========================================================================
    # Podcast Endpoints
    # =========================================================================

    @app.get("/api/podcasts")
    async def list_podcasts(
        refresh: bool = Query(False, description="Bypass the cache TTL"),
        offset: int = Query(0, ge=0, description="Skip episodes"),
        limit: int | None = Query(None, ge=1, le=100, description="Max episodes to return"),
    ) -> list[dict[str, Any]]:
        """List podcast episodes newest first; empty when the feed is unavailable."""
        try:
            episodes = await app.state.service.list_items(
                FeedKind.PODCAST,
                force_refresh=refresh,
                offset=offset,
                limit=limit,
            )
        except (FetchError, MalformedFeedError) as e:
            logger.error("Podcast feed unavailable: %s", e)
            return []
        return [episode.model_dump(mode="json") for episode in episodes]

    @app.get("/api/podcast/{key}")
    async def get_podcast(key: str) -> dict[str, Any]:
        """Get a podcast episode by guid or slug."""
        try:
            episode = await app.state.service.find_by_guid_or_slug(FeedKind.PODCAST, key)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail="Podcast not found") from e
        except (FetchError, MalformedFeedError) as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        result: dict[str, Any] = episode.model_dump(mode="json")
        return result

    return app


# Default app instance for uvicorn
# Usage: uvicorn portalfeeds.api.fastapi:app
def _create_default_app() -> FastAPI:
    """Create app wired from PORTAL_* environment settings."""
    from portalfeeds.composition import build_service

    return create_app(build_service())


app = _create_default_app()
