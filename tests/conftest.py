"""Shared fixtures for hls-relay tests."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from hls_relay.errors import ResolutionError
from hls_relay.fetch import FetchResponse
from hls_relay.resolver import Resolver

MANIFEST_URL = "https://cdn.example/path/index.m3u8"
MEDIA_PLAYLIST = "#EXTM3U\n#EXT-X-VERSION:3\n#EXTINF:4.0,\nseg0.ts\n#EXTINF:4.0,\nseg1.ts\n"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResolver(Resolver):
    """Resolver that counts calls and can be held open or made to fail."""

    def __init__(self, url: str = MANIFEST_URL, fail_times: int = 0):
        self.url = url
        self.fail_times = fail_times
        self.calls = []
        self.gate = asyncio.Event()
        self.gate.set()

    async def resolve(self, content_id: str) -> str:
        self.calls.append(content_id)
        await self.gate.wait()
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ResolutionError(f"cannot resolve {content_id}")
        return self.url


def make_response(
    status: int = 200,
    content: bytes = MEDIA_PLAYLIST.encode(),
    url: str = MANIFEST_URL,
    reason: str = "OK",
) -> FetchResponse:
    return FetchResponse(status=status, reason=reason, url=url, content=content)


def make_fetcher(*responses: FetchResponse) -> MagicMock:
    """Mock FetchAdapter whose fetch() returns the given responses in order."""
    fetcher = MagicMock()
    if len(responses) == 1:
        fetcher.fetch = AsyncMock(return_value=responses[0])
    else:
        fetcher.fetch = AsyncMock(side_effect=list(responses))
    fetcher.aclose = AsyncMock()
    return fetcher


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def resolver():
    return FakeResolver()
