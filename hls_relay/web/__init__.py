"""
hls-relay web layer — FastAPI app exposing the relay over HTTP.

Usage:
    from hls_relay.web import create_app

    app = create_app(RelayConfig.load("relay.yaml"))
    # Run with: python -m hls_relay.web --port 3000
"""

from .protocol import CORS_HEADERS, RESPONSE_POLICIES, classify_url, headers_for
from .server import create_app

__all__ = [
    "create_app",
    "CORS_HEADERS",
    "RESPONSE_POLICIES",
    "classify_url",
    "headers_for",
]
