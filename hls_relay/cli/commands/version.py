"""Version command."""

import click
from rich.console import Console

from ... import __version__

console = Console()


@click.command()
def version() -> None:
    """Show hls-relay version."""
    console.print(f"[bold]hls-relay[/bold] v{__version__}")
