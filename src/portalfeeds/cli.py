"""CLI entry point."""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from portalfeeds.core.config import get_settings
from portalfeeds.core.exceptions import PortalFeedsError
from portalfeeds.models.base import FeedKind

app = typer.Typer(
    name="portalfeeds",
    help="Cached, normalized blog, video and podcast feeds",
    no_args_is_help=True,
)
console = Console()


def configure_logging(level: str) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Override PORTAL_LOG_LEVEL"),
) -> None:
    """portalfeeds command line."""
    configure_logging(log_level or get_settings().log_level)


@app.command()
def version() -> None:
    """Show version."""
    from portalfeeds import __version__

    console.print(f"portalfeeds {__version__}")


@app.command()
def fetch(
    url: str = typer.Argument(..., help="Feed URL"),
    kind: FeedKind | None = typer.Option(None, "--kind", "-k", help="Feed dialect (detected when omitted)"),
    limit: int = typer.Option(20, "--limit", "-n", help="Rows to show"),
) -> None:
    """Fetch one feed and show its normalized items."""
    from portalfeeds.composition import build_fetcher
    from portalfeeds.parser import detect_feed_kind, parse_feed

    settings = get_settings()

    async def _run() -> tuple[FeedKind, list]:
        async with build_fetcher(settings) as fetcher:
            response = await fetcher.fetch(url)
        feed_kind = kind or detect_feed_kind(response.content, response.content_type)
        return feed_kind, list(parse_feed(feed_kind, response.content).items)

    try:
        feed_kind, items = asyncio.run(_run())
    except PortalFeedsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    table = Table(title=f"{feed_kind.value} feed: {len(items)} items")
    table.add_column("Published", style="dim")
    table.add_column("Key", style="cyan")
    table.add_column("Title")
    for item in items[:limit]:
        key = item.id if feed_kind is FeedKind.VIDEO else item.slug
        table.add_row(item.published_at.strftime("%Y-%m-%d %H:%M"), key, item.title)
    console.print(table)


@app.command()
def config() -> None:
    """Show the resolved configuration (remote document over environment)."""
    from portalfeeds.composition import build_service

    async def _run():
        service = build_service()
        try:
            return await service.config()
        finally:
            await service.store.close()

    resolved = asyncio.run(_run())

    table = Table(title="Resolved configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Site name", resolved.site_name)
    table.add_row("Author", resolved.author)
    for feed_kind in FeedKind:
        table.add_row(f"{feed_kind.value} feed", resolved.url_for(feed_kind) or "[dim]not set[/dim]")
    table.add_row("Meta title", resolved.seo.meta_title)
    table.add_row("Meta description", resolved.seo.meta_description)
    table.add_row("Meta keywords", resolved.seo.meta_keywords)
    console.print(table)


if __name__ == "__main__":
    app()
