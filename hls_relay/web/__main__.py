"""
CLI entry point for the hls-relay web server.

Usage:
    python -m hls_relay.web --port 3000 --referer-url https://site.example/
    hls-relay-web -c relay.yaml
"""

import argparse
import sys
from dataclasses import replace

from ..config import RelayConfig
from ..utils.logging import setup_logging


def build_config(args: argparse.Namespace) -> RelayConfig:
    """Config file (if any), then environment, then explicit flags."""
    config = RelayConfig.load(args.config) if args.config else RelayConfig()
    config = config.with_env()
    overrides = {
        name: getattr(args, name)
        for name in ("host", "port", "referer_url", "static_dir", "log_level")
        if getattr(args, name) is not None
    }
    return replace(config, **overrides) if overrides else config


def main() -> None:
    parser = argparse.ArgumentParser(
        description="hls-relay web server",
        prog="hls-relay-web",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Server host (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Server port (default: 3000, or $PORT)",
    )
    parser.add_argument(
        "--referer-url",
        default=None,
        help="Referer/Origin sent on every upstream request (default: $REFERER_URL)",
    )
    parser.add_argument(
        "--static-dir",
        default=None,
        help="Directory with a player page to serve at /",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()

    try:
        config = build_config(args)
    except (OSError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)

    setup_logging(config)

    try:
        import uvicorn
    except ImportError:
        print(
            "uvicorn is required. Install with: pip install hls-relay",
            file=sys.stderr,
        )
        sys.exit(1)

    from .server import create_app

    app = create_app(config)

    print(f"\n  hls-relay")
    print(f"  URL: http://{config.host}:{config.port}")
    if config.referer_url:
        print(f"  Referer: {config.referer_url}")
    print()

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
