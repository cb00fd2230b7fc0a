"""In-memory resource cache with lazy TTL expiry."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .config import DEFAULT_CACHE_TTL
from .types import Payload, ResourceClass

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    key: str
    value: Payload
    resource_class: ResourceClass
    inserted_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now >= self.inserted_at + self.ttl


class ResourceCache:
    """
    Process-lifetime mapping from a resource key to its payload.

    Entries are dropped lazily: a read after ``inserted_at + ttl`` behaves
    as a miss and evicts the entry. Concurrent uncoordinated writes to the
    same key are last-write-wins.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be greater than 0")
        self._ttl = ttl
        self._clock = clock
        self._name = name
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is not None and entry.expired(self._clock()):
            del self._entries[key]
            entry = None
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry

    def set(self, key: str, value: Payload, resource_class: ResourceClass) -> CacheEntry:
        entry = CacheEntry(
            key=key,
            value=value,
            resource_class=resource_class,
            inserted_at=self._clock(),
            ttl=self._ttl,
        )
        self._entries[key] = entry
        logger.debug(f"[{self._name}] stored {resource_class.value} {key}")
        return entry

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry now. Returns how many were removed."""
        now = self._clock()
        stale = [k for k, e in self._entries.items() if e.expired(now)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def get_stats(self) -> dict:
        return {
            "name": self._name,
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "ttl": self._ttl,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None
