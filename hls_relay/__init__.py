"""
hls-relay — HLS proxy for players that cannot set request headers.

Fetches HLS manifests and segments with a spoofed Referer/Origin/User-Agent,
rewrites every URI in a manifest so follow-up requests come back through the
proxy, and caches what it fetched for the length of a viewing session.

Basic Usage:
    from hls_relay import rewrite_playlist

    text = rewrite_playlist(playlist, "https://cdn.example/live/index.m3u8")

Service Usage:
    import asyncio
    from hls_relay import RelayConfig, RelayService

    async def main():
        service = RelayService.from_config(RelayConfig(referer_url="https://site.example/"))
        result = await service.proxy("https://cdn.example/live/index.m3u8")
        if result:
            print(result.value.body)
        await service.close()

    asyncio.run(main())
"""

__version__ = "0.3.0"

from .cache import CacheEntry, ResourceCache
from .config import RelayConfig
from .errors import (
    FetchTimeoutError,
    InvalidArgumentError,
    NetworkError,
    RelayError,
    ResolutionError,
    UpstreamError,
    ValidationError,
)
from .fetch import FetchAdapter, FetchResponse
from .resolver import Resolver, YtDlpResolver
from .rewriter import PROXY_PATH, rewrite_playlist
from .service import RelayService, is_valid_video_id
from .single_flight import SingleFlight
from .types import ProxiedResource, ResourceClass, Result

__all__ = [
    "__version__",
    # Service
    "RelayService",
    "is_valid_video_id",
    # Configuration
    "RelayConfig",
    # Components
    "FetchAdapter",
    "FetchResponse",
    "ResourceCache",
    "CacheEntry",
    "SingleFlight",
    "Resolver",
    "YtDlpResolver",
    "PROXY_PATH",
    "rewrite_playlist",
    # Types
    "ProxiedResource",
    "ResourceClass",
    "Result",
    # Errors
    "RelayError",
    "ValidationError",
    "InvalidArgumentError",
    "UpstreamError",
    "NetworkError",
    "FetchTimeoutError",
    "ResolutionError",
]
