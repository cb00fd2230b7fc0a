"""
Relay service — the two request pipelines.

Raw URL:
    url cache → (miss) fetch → rewrite if manifest → url cache.set

Content identifier:
    validate → id cache → (miss) single-flight[
        id cache → resolve → fetch → rewrite → id cache.set
    ]

Each stage returns a Result so that a failure is produced in exactly one
place and reported to the caller exactly once. One RelayService is built at
process start and handed to the web layer.
"""

import logging
import re
from typing import Optional

from .cache import ResourceCache
from .config import RelayConfig
from .errors import RelayError, UpstreamError, ValidationError
from .fetch import FetchAdapter, FetchResponse
from .resolver import Resolver, YtDlpResolver
from .rewriter import PROXY_PATH, rewrite_playlist
from .single_flight import SingleFlight
from .types import ProxiedResource, ResourceClass, Result

logger = logging.getLogger(__name__)

VIDEO_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{11}")


def is_valid_video_id(video_id: Optional[str]) -> bool:
    return bool(video_id) and VIDEO_ID_PATTERN.fullmatch(video_id) is not None


class RelayService:
    """
    Owns the caches, the single-flight coordinator, the fetch adapter and
    the resolver for one process.

    Args:
        fetcher: FetchAdapter used for every upstream request
        resolver: Resolver for content identifiers
        referer_url: Referer forwarded on every upstream request
        cache_ttl: Lifetime of cached entries in seconds
        proxy_path: Endpoint path rewritten manifests point at
    """

    def __init__(
        self,
        fetcher: Optional[FetchAdapter] = None,
        resolver: Optional[Resolver] = None,
        referer_url: str = "",
        cache_ttl: float = 18000,
        proxy_path: str = PROXY_PATH,
        url_cache: Optional[ResourceCache] = None,
        video_cache: Optional[ResourceCache] = None,
    ) -> None:
        self.fetcher = fetcher or FetchAdapter()
        self.resolver = resolver or YtDlpResolver()
        self.referer_url = referer_url
        self.proxy_path = proxy_path
        # An empty ResourceCache is falsy, so test against None.
        if url_cache is None:
            url_cache = ResourceCache(ttl=cache_ttl, name="url")
        if video_cache is None:
            video_cache = ResourceCache(ttl=cache_ttl, name="video")
        self.url_cache = url_cache
        self.video_cache = video_cache
        self.flight = SingleFlight()

    @classmethod
    def from_config(cls, config: RelayConfig) -> "RelayService":
        return cls(
            fetcher=FetchAdapter(timeout=config.fetch_timeout, user_agent=config.user_agent),
            resolver=YtDlpResolver(watch_url=config.watch_url, format_sort=config.format_sort),
            referer_url=config.referer_url,
            cache_ttl=config.cache_ttl,
        )

    async def close(self) -> None:
        await self.fetcher.aclose()

    # === Stages ===

    async def _fetch(self, url: str) -> Result[FetchResponse]:
        try:
            response = await self.fetcher.fetch(url, self.referer_url)
        except RelayError as exc:
            return Result.failure(exc)
        if not response.ok:
            return Result.failure(UpstreamError(response.status, response.reason, url=response.url))
        return Result.success(response)

    def _rewrite(self, response: FetchResponse) -> Result[str]:
        # Relative references resolve against where the playlist really
        # lives, i.e. after redirects.
        return Result.success(rewrite_playlist(response.text(), response.url, self.proxy_path))

    async def _resolve(self, video_id: str) -> Result[str]:
        try:
            return Result.success(await self.resolver.resolve(video_id))
        except RelayError as exc:
            return Result.failure(exc)

    # === Raw URL pipeline ===

    async def proxy(self, url: Optional[str]) -> Result[ProxiedResource]:
        """Serve ``url`` from the url cache or fetch, rewrite and cache it."""
        if not url:
            return Result.failure(ValidationError("URL parameter is required"))

        resource_class = ResourceClass.for_url(url)
        entry = self.url_cache.get(url)
        if entry is not None:
            logger.info(f"Serving from cache: {url}")
            return Result.success(ProxiedResource(entry.value, entry.resource_class, from_cache=True))

        fetched = await self._fetch(url)
        if resource_class is ResourceClass.MANIFEST:
            body = fetched.then(self._rewrite)
        else:
            body = fetched.then(lambda r: Result.success(r.content))
        if not body:
            return Result.failure(body.error)

        self.url_cache.set(url, body.value, resource_class)
        return Result.success(ProxiedResource(body.value, resource_class))

    # === Content identifier pipeline ===

    async def watch(self, video_id: Optional[str]) -> Result[ProxiedResource]:
        """Resolve ``video_id`` to a rewritten manifest, at most once per id at a time."""
        if not is_valid_video_id(video_id):
            return Result.failure(ValidationError("Failed to validate video ID"))

        entry = self.video_cache.get(video_id)
        if entry is not None:
            logger.info(f"Serving from cache: {video_id}")
            return Result.success(ProxiedResource(entry.value, ResourceClass.MANIFEST, from_cache=True))

        return await self.flight.do(video_id, lambda: self._load_video(video_id))

    async def _load_video(self, video_id: str) -> Result[ProxiedResource]:
        # A previous flight may have populated the cache after our check.
        entry = self.video_cache.get(video_id)
        if entry is not None:
            return Result.success(ProxiedResource(entry.value, ResourceClass.MANIFEST, from_cache=True))

        logger.info(f"New request for: {video_id}")
        resolved = await self._resolve(video_id)
        if not resolved:
            return Result.failure(resolved.error)
        fetched = await self._fetch(resolved.value)
        manifest = fetched.then(self._rewrite)
        if not manifest:
            return Result.failure(manifest.error)

        self.video_cache.set(video_id, manifest.value, ResourceClass.MANIFEST)
        return Result.success(ProxiedResource(manifest.value, ResourceClass.MANIFEST))

    def get_stats(self) -> dict:
        return {
            "url_cache": self.url_cache.get_stats(),
            "video_cache": self.video_cache.get_stats(),
            "single_flight": self.flight.get_stats(),
        }

