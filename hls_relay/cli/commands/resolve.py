"""Resolve command."""

import asyncio

import click
from rich.console import Console

from ...errors import ResolutionError
from ...resolver import YtDlpResolver
from ...service import is_valid_video_id
from ..app import load_config

console = Console()


@click.command()
@click.argument("video_id")
@click.pass_context
def resolve(ctx: click.Context, video_id: str) -> None:
    """Print the manifest URL a video ID resolves to.

    Examples:

        hls-relay resolve dQw4w9WgXcQ
    """
    if not is_valid_video_id(video_id):
        raise click.BadParameter("must be 11 characters of [A-Za-z0-9_-]", param_hint="VIDEO_ID")

    config = load_config(ctx)
    resolver = YtDlpResolver(watch_url=config.watch_url, format_sort=config.format_sort)
    try:
        url = asyncio.run(resolver.resolve(video_id))
    except ResolutionError as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        raise SystemExit(1)

    click.echo(url)
