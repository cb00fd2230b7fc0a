"""Serve command."""

from dataclasses import replace

import click
from rich.console import Console

from ...utils.logging import setup_logging
from ..app import load_config

console = Console()


@click.command()
@click.option("--host", default=None, help="Bind address (default: from config or 0.0.0.0)")
@click.option("--port", "-p", type=int, default=None, help="Port (default: from config, $PORT or 3000)")
@click.option("--referer-url", default=None, help="Referer/Origin sent on upstream requests")
@click.option("--static-dir", type=click.Path(file_okay=False), default=None, help="Player page directory served at /")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default=None,
    help="Log level",
)
@click.pass_context
def serve(ctx: click.Context, host, port, referer_url, static_dir, log_level) -> None:
    """Run the relay HTTP server.

    Examples:

        hls-relay serve

        hls-relay serve -p 8080 --referer-url https://site.example/
    """
    config = load_config(ctx)
    overrides = {
        "host": host,
        "port": port,
        "referer_url": referer_url,
        "static_dir": static_dir,
        "log_level": log_level,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    try:
        config = replace(config, **overrides)
    except ValueError as exc:
        raise click.ClickException(str(exc))

    setup_logging(config)

    import uvicorn

    from ...web.server import create_app

    console.print(f"[bold]hls-relay[/bold] on http://{config.host}:{config.port}")
    if config.referer_url:
        console.print(f"[dim]Referer: {config.referer_url}[/dim]")

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
