"""In-memory TTL cache for extraction and response results.

Entries are never updated or evicted; an entry older than the TTL is simply
treated as absent and overwritten by the next successful computation. There
is no size bound and no locking: every writer only inserts, and a duplicated
computation under concurrent misses is tolerated.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Generic, TypeVar

import structlog

from pagechat.models.cache import CacheEntry

log = structlog.get_logger()

V = TypeVar("V")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TTLCache(Generic[V]):
    """Key/value cache whose entries expire ``ttl_seconds`` after insertion."""

    def __init__(self, name: str, ttl_seconds: int, *, clock: Clock = _utcnow) -> None:
        self.name = name
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: dict[str, CacheEntry[V]] = {}

    def get(self, key: str) -> V | None:
        """Return the cached value, or ``None`` on a miss or an expired entry."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self._ttl:
            log.debug("cache_expired", cache=self.name, key=key)
            return None
        return entry.value

    def set(self, key: str, value: V) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    def __len__(self) -> int:
        return len(self._entries)
