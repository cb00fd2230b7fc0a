"""Fetch command."""

import asyncio

import click
from rich.console import Console
from rich.table import Table

from ...errors import RelayError
from ...fetch import FetchAdapter, FetchResponse
from ..app import load_config

console = Console()


@click.command()
@click.argument("url")
@click.option("--referer-url", default=None, help="Override the configured referer")
@click.pass_context
def fetch(ctx: click.Context, url: str, referer_url: str) -> None:
    """Fetch one URL with the relay's spoofed headers and show the response.

    Useful to check whether an origin accepts the configured referer.

    Examples:

        hls-relay fetch https://cdn.example/live/index.m3u8

        hls-relay fetch https://cdn.example/seg0.ts --referer-url https://site.example/
    """
    config = load_config(ctx)
    referer = config.referer_url if referer_url is None else referer_url
    try:
        response = asyncio.run(_fetch(url, referer, config.fetch_timeout, config.user_agent))
    except RelayError as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        raise SystemExit(1)

    table = Table(title="Upstream Response")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    color = "green" if response.ok else "red"
    table.add_row("status", f"[{color}]{response.status} {response.reason}[/{color}]")
    table.add_row("url", response.url)
    table.add_row("content-type", response.headers.get("content-type", "-"))
    table.add_row("bytes", str(len(response.content)))
    console.print(table)

    if not response.ok:
        raise SystemExit(1)


async def _fetch(url: str, referer: str, timeout: float, user_agent: str) -> FetchResponse:
    async with FetchAdapter(timeout=timeout, user_agent=user_agent) as adapter:
        return await adapter.fetch(url, referer)
