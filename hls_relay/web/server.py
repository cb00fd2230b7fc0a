"""
FastAPI web server for hls-relay.

Provides:
- GET /api/v1/streamingProxy?url=... — proxy + cache by raw upstream URL
- GET /watch?v=<id> — resolve a video ID to a rewritten manifest
- GET /health — liveness
- OPTIONS on any path — CORS preflight
- Permissive CORS headers on every response
- Optional static file serving (player page)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

from .. import __version__
from ..config import RelayConfig
from ..rewriter import PROXY_PATH
from ..service import RelayService
from ..types import ProxiedResource
from .protocol import (
    CORS_HEADERS,
    headers_for,
    proxy_error_to_response,
    watch_error_to_response,
)

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[RelayConfig] = None,
    service: Optional[RelayService] = None,
) -> Any:
    """Create the FastAPI application.

    Args:
        config: Relay configuration (default: RelayConfig())
        service: Pre-built RelayService; built from config when omitted

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Request
        from fastapi.responses import JSONResponse, Response
    except ImportError:
        raise ImportError(
            "FastAPI is required for the web server. "
            "Install with: pip install hls-relay"
        )

    config = config or RelayConfig()
    service = service or RelayService.from_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("hls-relay accepting connections")
        yield
        logger.info("Shutting down hls-relay...")
        await service.close()

    app = FastAPI(
        title="hls-relay",
        description="HLS proxy with referer spoofing and manifest rewriting",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.config = config

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        # Preflight is answered here for every path, before routing.
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Server error on {request.url.path}")
        return JSONResponse(
            {"error": "Something went wrong!", "message": str(exc)},
            status_code=500,
            headers=CORS_HEADERS,
        )

    def _send(resource: ProxiedResource) -> Response:
        return Response(
            content=resource.body,
            status_code=200,
            headers=headers_for(resource.resource_class),
        )

    # === REST Endpoints ===

    @app.get("/health")
    async def get_health() -> JSONResponse:
        """Health check."""
        return JSONResponse({"status": "ok"})

    @app.get(PROXY_PATH)
    async def streaming_proxy(url: Optional[str] = None) -> Response:
        """Proxy and cache one upstream resource by absolute URL."""
        result = await service.proxy(url)
        if not result:
            status, body = proxy_error_to_response(result.error)
            if status >= 500:
                logger.error(f"Proxy error for {url}: {result.error.message}")
            return JSONResponse(body, status_code=status)
        return _send(result.value)

    @app.get("/watch")
    async def watch(v: Optional[str] = None) -> Response:
        """Resolve a video ID to a proxied manifest."""
        result = await service.watch(v)
        if not result:
            status, body = watch_error_to_response(result.error)
            logger.error(f"Watch failed for {v!r}: {result.error.message}")
            return JSONResponse(body, status_code=status)
        return _send(result.value)

    # === Optional: Serve static player page ===

    if config.static_dir:
        static_dir = Path(config.static_dir).expanduser()
        if static_dir.is_dir():
            from fastapi.staticfiles import StaticFiles
            app.mount("/", StaticFiles(directory=str(static_dir), html=True))
            logger.info(f"Serving static files from {static_dir}")
        else:
            logger.warning(f"Static directory not found: {static_dir}")

    return app
