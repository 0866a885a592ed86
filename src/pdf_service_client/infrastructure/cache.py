"""Cache implementations for infrastructure.

Usage example:
    from pdf_service_client.infrastructure.cache import MemoryCache

    cache = MemoryCache(ttl_seconds=lambda: 300.0)
    cache.store(("GET", "http://localhost:3000/status/42"), envelope)
    entry = cache.lookup(("GET", "http://localhost:3000/status/42"))
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import override

from ..protocols import Clock
from ..protocols import ResponseCache as ResponseCacheProtocol
from ..types import CacheEntry, CacheKey, CacheStats, ResponseEnvelope


def cache_key_text(key: CacheKey) -> str:
    """Render a cache key as `METHOD:url`, the form pattern clears match against."""
    method, url = key
    return f"{method}:{url}"


def _empty_entries() -> dict[CacheKey, CacheEntry]:
    return {}


@dataclass
class MemoryCache(ResponseCacheProtocol):
    """In-memory envelope cache with TTL-based validity.

    Lookups never delete: a stale entry is skipped and left for `sweep()`.
    The TTL is read through a callable so config changes apply immediately.
    """

    ttl_seconds: Callable[[], float]
    clock: Clock = time.monotonic
    _entries: dict[CacheKey, CacheEntry] = field(default_factory=_empty_entries, init=False)

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at < self.ttl_seconds()

    @override
    def lookup(self, key: CacheKey) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None or not self._is_fresh(entry, self.clock()):
            return None
        return entry

    @override
    def store(self, key: CacheKey, envelope: ResponseEnvelope) -> None:
        self._entries[key] = CacheEntry(envelope=envelope, stored_at=self.clock())

    @override
    def clear(self, pattern: str | None = None) -> None:
        if pattern is None:
            self._entries.clear()
            return
        for key in [k for k in self._entries if pattern in cache_key_text(k)]:
            del self._entries[key]

    @override
    def sweep(self) -> int:
        now = self.clock()
        stale = [key for key, entry in self._entries.items() if not self._is_fresh(entry, now)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    @override
    def stats(self) -> CacheStats:
        now = self.clock()
        valid = sum(1 for entry in self._entries.values() if self._is_fresh(entry, now))
        return CacheStats(
            total_entries=len(self._entries),
            valid_entries=valid,
            expired_entries=len(self._entries) - valid,
            ttl_seconds=self.ttl_seconds(),
        )
