"""hls-relay CLI application."""

import os
from pathlib import Path

import click
from rich.console import Console

from .. import __version__
from ..config import RelayConfig

console = Console()


def find_config() -> str | None:
    """
    Find config file using standard priority order:

    1. HLS_RELAY_CONFIG environment variable
    2. .hls-relay.yaml in current directory (project config)
    3. ~/.config/hls-relay/config.yaml (user config)

    Returns None if no config found.
    """
    env_config = os.environ.get("HLS_RELAY_CONFIG")
    if env_config:
        path = Path(env_config)
        if path.exists():
            return str(path)

    project_config = Path.cwd() / ".hls-relay.yaml"
    if project_config.exists():
        return str(project_config)

    user_config = Path.home() / ".config" / "hls-relay" / "config.yaml"
    if user_config.exists():
        return str(user_config)

    return None


def load_config(ctx: click.Context) -> RelayConfig:
    """Config from the resolved file (if any) with environment overrides."""
    path = ctx.obj.get("config")
    try:
        config = RelayConfig.load(path) if path else RelayConfig()
        return config.with_env()
    except (OSError, ValueError) as exc:
        raise click.ClickException(f"Invalid configuration: {exc}")


@click.group()
@click.version_option(version=__version__, prog_name="hls-relay")
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file path")
@click.option("--no-config", is_flag=True, help="Disable config auto-loading")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, config: str, no_config: bool, verbose: bool) -> None:
    """hls-relay — HLS proxy with referer spoofing and manifest rewriting.

    Config file locations (in priority order):

        1. -c/--config PATH (explicit)

        2. HLS_RELAY_CONFIG env var

        3. .hls-relay.yaml (project config)

        4. ~/.config/hls-relay/config.yaml (user config)

    Examples:

        hls-relay serve --port 3000

        hls-relay rewrite index.m3u8 --base-url https://cdn.example/live/index.m3u8

        hls-relay resolve dQw4w9WgXcQ
    """
    ctx.ensure_object(dict)

    if no_config:
        config = None
    elif config is None:
        config = find_config()
        if config and verbose:
            console.print(f"[dim]Using config: {config}[/dim]")

    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


# Import and register commands
from .commands import fetch, resolve, rewrite, serve, version

cli.add_command(serve.serve)
cli.add_command(rewrite.rewrite)
cli.add_command(resolve.resolve)
cli.add_command(fetch.fetch)
cli.add_command(version.version)
