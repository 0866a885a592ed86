"""Protocol definitions for dependency injection.

These protocols define the abstract interfaces that client components depend on,
enabling isolated unit testing with fake implementations.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Protocol, runtime_checkable

from .types import CacheEntry, CacheKey, CacheStats, ResponseEnvelope, StoredUser

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]
ProgressCallback = Callable[[int, int], None]


@runtime_checkable
class SessionStore(Protocol):
    """Host-owned store of the signed-in user."""

    def get_stored_user(self) -> StoredUser | None:
        """Return the stored user record, or None when signed out."""
        ...


@runtime_checkable
class ResponseCache(Protocol):
    """Abstract cache of response envelopes."""

    def lookup(self, key: CacheKey) -> CacheEntry | None:
        """Return a servable entry, or None if missing or stale."""
        ...

    def store(self, key: CacheKey, envelope: ResponseEnvelope) -> None:
        """Store an envelope, replacing any existing entry."""
        ...

    def clear(self, pattern: str | None = None) -> None:
        """Drop entries whose key contains pattern, or everything."""
        ...

    def sweep(self) -> int:
        """Drop stale entries and return how many were removed."""
        ...

    def stats(self) -> CacheStats:
        """Return occupancy counts."""
        ...


@runtime_checkable
class Credentials(Protocol):
    """Abstract source of auth headers for outgoing requests."""

    def headers_for(
        self,
        custom: Mapping[str, str] | None = None,
        *,
        defaults: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        """Merge default, credential and custom headers.

        `defaults`, when given, replaces the configured default headers.
        """
        ...

    def observe(self, response_headers: Mapping[str, str]) -> None:
        """Pick up a refreshed CSRF token from a response."""
        ...


@runtime_checkable
class RetryPolicy(Protocol):
    """Abstract retry policy for transient failures."""

    max_retries: int
    base_delay_seconds: float

    def compute_backoff(self, attempt: int) -> float:
        """Return the delay before retry number `attempt` (1-based)."""
        ...

    def is_retryable(self, error: BaseException) -> bool:
        """Return True when the failure should be retried."""
        ...
