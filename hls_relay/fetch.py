"""
Outbound fetches with spoofed browser identity.

Origins that gate HLS on Referer/Origin/User-Agent accept requests made
through FetchAdapter as if they came from a desktop browser embedded on the
configured referer page.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urlsplit

import httpx

from .config import DEFAULT_FETCH_TIMEOUT, DEFAULT_USER_AGENT
from .errors import FetchTimeoutError, InvalidArgumentError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


def origin_of(url: str) -> str:
    """
    Return the origin ``scheme://host[:port]`` of an absolute URL.

    Credentials are dropped, the host is lowercased and the port is kept
    only when it differs from the scheme's default.
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise InvalidArgumentError(f"Cannot derive origin from {url!r}: {exc}") from exc
    if not parts.scheme or not parts.hostname:
        raise InvalidArgumentError(f"Cannot derive origin from {url!r}")

    scheme = parts.scheme.lower()
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    if port is None or port == DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


@dataclass
class FetchResponse:
    """Upstream response with its body already read."""
    status: int
    reason: str
    url: str
    content: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    encoding: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8", errors="replace")

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "FetchResponse":
        return cls(
            status=response.status_code,
            reason=response.reason_phrase,
            url=str(response.url),
            content=response.content,
            headers=dict(response.headers),
            encoding=response.encoding,
        )


class FetchAdapter:
    """
    GET with spoofed identity headers, redirects and a hard timeout.

    Usage:
        adapter = FetchAdapter(timeout=10.0)
        response = await adapter.fetch(url, referer_url="https://site.example/")
        if response.ok:
            data = response.content
        await adapter.aclose()

    Non-2xx responses are returned, never raised. Transport failures raise
    NetworkError, and exceeding the timeout raises FetchTimeoutError.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._user_agent = user_agent

    @property
    def timeout(self) -> float:
        return self._timeout

    def build_headers(self, referer_url: Optional[str] = None) -> Dict[str, str]:
        """Request headers for one fetch; Referer/Origin only when given."""
        headers = {
            "User-Agent": self._user_agent,
            "Accept": "*/*",
            "Accept-Language": "en-US,en;q=0.9",
            "Connection": "keep-alive",
        }
        if referer_url:
            headers["Referer"] = referer_url
            headers["Origin"] = origin_of(referer_url)
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True, timeout=self._timeout)
        return self._client

    async def fetch(self, url: str, referer_url: Optional[str] = None) -> FetchResponse:
        """
        Fetch ``url`` and read its full body.

        Args:
            url: Absolute resource URL (required)
            referer_url: Page the request should appear to come from

        Returns:
            FetchResponse for any HTTP status

        Raises:
            InvalidArgumentError: If url is empty
            FetchTimeoutError: If the request and body read exceed the timeout
            NetworkError: On any other transport failure
        """
        if not url:
            raise InvalidArgumentError("URL is required")

        headers = self.build_headers(referer_url)
        client = self._get_client()
        try:
            response = await asyncio.wait_for(
                client.get(url, headers=headers, follow_redirects=True),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning(f"Fetch timed out after {self._timeout:.0f}s: {url}")
            raise FetchTimeoutError(f"Timed out after {self._timeout:.0f}s fetching {url}") from exc
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.warning(f"Fetch error for {url!r}: {exc}")
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

        if response.status_code >= 400:
            logger.debug(f"Upstream {response.status_code} for {url}")
        return FetchResponse.from_httpx(response)

    async def aclose(self) -> None:
        """Close the underlying client if this adapter created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FetchAdapter":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
