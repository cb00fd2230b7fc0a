"""
hls-relay type definitions.

This module contains the public value types shared by the cache, the relay
service and the web layer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar, Union
from urllib.parse import urlsplit

from .errors import RelayError

T = TypeVar("T")
U = TypeVar("U")

Payload = Union[str, bytes]


class ResourceClass(Enum):
    """Kind of proxied resource; selects response headers at the boundary."""
    MANIFEST = "manifest"
    SEGMENT = "segment"

    @classmethod
    def for_url(cls, url: str) -> "ResourceClass":
        """Playlists are recognized by a ``.m3u8`` path suffix; anything else is a segment."""
        try:
            path = urlsplit(url).path
        except ValueError:
            # Unparseable (e.g. a broken IPv6 host); the fetch reports it.
            path = url
        if path.lower().endswith(".m3u8"):
            return cls.MANIFEST
        return cls.SEGMENT


@dataclass
class Result(Generic[T]):
    """Outcome of one pipeline stage: either a value or a RelayError."""
    value: Optional[T] = None
    error: Optional[RelayError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: RelayError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def then(self, fn: Callable[[T], "Result[U]"]) -> "Result[U]":
        """Feed the value into the next stage, or pass the failure through."""
        if self.error is not None:
            return Result(error=self.error)
        return fn(self.value)

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        """Allow `if result:` checks."""
        return self.ok


@dataclass
class ProxiedResource:
    """A body ready to be sent to the player."""
    body: Payload
    resource_class: ResourceClass
    from_cache: bool = False

    @property
    def is_manifest(self) -> bool:
        return self.resource_class is ResourceClass.MANIFEST
