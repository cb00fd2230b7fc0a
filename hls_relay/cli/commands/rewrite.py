"""Rewrite command."""

import click

from ...rewriter import PROXY_PATH, rewrite_playlist


@click.command()
@click.argument("playlist", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--base-url", "-b", required=True, help="URL the playlist was fetched from")
@click.option("--proxy-path", default=PROXY_PATH, show_default=True, help="Proxy endpoint path")
def rewrite(playlist, base_url: str, proxy_path: str) -> None:
    """Rewrite a playlist file so every URI goes through the proxy.

    Reads from stdin when PLAYLIST is omitted or "-".

    Examples:

        hls-relay rewrite index.m3u8 -b https://cdn.example/live/index.m3u8

        curl -s https://cdn.example/live/index.m3u8 | hls-relay rewrite -b https://cdn.example/live/index.m3u8
    """
    click.echo(rewrite_playlist(playlist.read(), base_url, proxy_path), nl=False)
