"""Content identifier → manifest URL resolution.

The relay only needs one thing from a resolver: given an opaque content
identifier, produce the absolute URL of an HLS playlist. Resolvers are
pluggable:

1. Subclass Resolver and implement resolve()
2. Pass an instance to RelayService(resolver=...)

YtDlpResolver is the default; it asks yt-dlp for the best format sorted by
the ``m3u8`` protocol and returns that format's URL.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import yt_dlp
from yt_dlp.utils import DownloadError

from .config import DEFAULT_WATCH_URL
from .errors import ResolutionError

logger = logging.getLogger(__name__)


class Resolver(ABC):
    """Maps a content identifier to a manifest URL."""

    @abstractmethod
    async def resolve(self, content_id: str) -> str:
        """Return the manifest URL or raise ResolutionError."""
        ...


class YtDlpResolver(Resolver):
    """Resolve video IDs through yt-dlp's extractor library."""

    def __init__(
        self,
        watch_url: str = DEFAULT_WATCH_URL,
        format_sort: list[str] | None = None,
        extra_opts: dict[str, Any] | None = None,
    ) -> None:
        self._watch_url = watch_url
        self._format_sort = list(format_sort or ["proto:m3u8"])
        self._extra_opts = dict(extra_opts or {})

    def page_url(self, content_id: str) -> str:
        return self._watch_url.format(video_id=content_id)

    def _options(self) -> dict[str, Any]:
        opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "noplaylist": True,
            "noprogress": True,
            "format_sort": list(self._format_sort),
        }
        opts.update(self._extra_opts)
        return opts

    def _extract(self, page_url: str) -> dict[str, Any]:
        with yt_dlp.YoutubeDL(self._options()) as ydl:
            info = ydl.extract_info(page_url, download=False)
        if not isinstance(info, dict):
            raise ResolutionError("yt-dlp did not return an info dict")
        return info

    @staticmethod
    def _manifest_url(info: dict[str, Any]) -> str:
        url = info.get("url")
        if url:
            return url
        # Separate video+audio selection: the first one is the video format.
        for fmt in info.get("requested_formats") or []:
            if fmt.get("url"):
                return fmt["url"]
        raise ResolutionError(f"No playable URL in yt-dlp result for {info.get('id', '?')}")

    async def resolve(self, content_id: str) -> str:
        page_url = self.page_url(content_id)
        try:
            info = await asyncio.to_thread(self._extract, page_url)
        except ResolutionError:
            raise
        except DownloadError as exc:
            logger.warning(f"yt-dlp failed for {content_id}: {exc}")
            raise ResolutionError(str(exc)) from exc
        except Exception as exc:
            logger.exception(f"Unexpected resolver failure for {content_id}")
            raise ResolutionError(f"{exc.__class__.__name__}: {exc}") from exc
        url = self._manifest_url(info)
        logger.info(f"Resolved {content_id} to {url}")
        return url
