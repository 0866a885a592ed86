"""Composition root for wiring client dependencies."""

from __future__ import annotations

import asyncio
import time

import httpx

from .client import ApiClient
from .config import ClientConfig, ConfigStore
from .infrastructure import CredentialProvider, MemoryCache, SerialQueue
from .protocols import Clock, SessionStore, Sleep


def build_api_client(
    *,
    config: ClientConfig | None = None,
    session: SessionStore | None = None,
    page_html: str | None = None,
    cookie_header: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> ApiClient:
    """Build an `ApiClient` with its own config, cache, credentials and queue.

    Args:
        config: Initial configuration; defaults to `ClientConfig()`.
        session: Host session store that exposes the signed-in user's API key.
        page_html: Page markup to read the initial CSRF token from.
        cookie_header: Cookie header to read the CSRF token from when the page has none.
        transport: Optional httpx transport (tests pass `httpx.MockTransport`).
        clock: Monotonic clock used for cache ages.
        sleep: Awaitable sleep used for retry and queue delays.
    """
    config_store = ConfigStore(config)
    credentials = CredentialProvider.from_page(
        html=page_html,
        cookie_header=cookie_header,
        session=session,
        default_headers=lambda: config_store.get().default_headers,
    )
    cache = MemoryCache(ttl_seconds=lambda: config_store.get().cache_ttl_seconds, clock=clock)
    queue = SerialQueue(delay_seconds=lambda: config_store.get().queue_delay_seconds, sleep=sleep)
    http_client = httpx.AsyncClient(transport=transport)
    return ApiClient(
        config_store=config_store,
        http_client=http_client,
        credentials=credentials,
        cache=cache,
        queue=queue,
        sleep=sleep,
    )
