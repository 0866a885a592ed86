"""Tests for client composition root wiring."""

from __future__ import annotations

import pytest

from pdf_service_client.composition import build_api_client
from pdf_service_client.config import ClientConfig
from pdf_service_client.infrastructure.credentials import API_KEY_HEADER, CSRF_HEADER
from tests.fakes import FakeClock, FakeServer, FakeSessionStore, RecordingSleep, json_response


@pytest.mark.asyncio
async def test_build_api_client_wires_config_credentials_and_transport(
    server: FakeServer, session: FakeSessionStore
) -> None:
    server.add("GET", "/auth/me", json_response(200, {"user": {"id": "u-1"}}))
    api = build_api_client(
        config=ClientConfig(base_url="http://pdf.test"),
        session=session,
        page_html='<meta name="csrf-token" content="page-token">',
        transport=server.transport,
    )

    async with api:
        envelope = await api.get("/auth/me")

    request = server.calls[0]
    assert envelope.success is True
    assert str(request.url) == "http://pdf.test/auth/me"
    assert request.headers[API_KEY_HEADER] == "key-123"
    assert request.headers[CSRF_HEADER] == "page-token"
    assert request.headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_cache_and_queue_follow_config_changes(
    server: FakeServer, clock: FakeClock, sleep: RecordingSleep
) -> None:
    api = build_api_client(transport=server.transport, clock=clock, sleep=sleep)

    api.set_config(cache_ttl_seconds=12.0, queue_delay_seconds=0.5)

    assert api.cache_stats().ttl_seconds == 12.0
    assert api.get_config().queue_delay_seconds == 0.5
    await api.dispose()


@pytest.mark.asyncio
async def test_independent_clients_do_not_share_state(
    server: FakeServer, clock: FakeClock, sleep: RecordingSleep
) -> None:
    server.add("GET", "/status/j-1", json_response(200, {"status": "done"}))
    first = build_api_client(
        config=ClientConfig(base_url="http://pdf.test"),
        transport=server.transport,
        clock=clock,
        sleep=sleep,
    )
    second = build_api_client(
        config=ClientConfig(base_url="http://pdf.test"),
        transport=server.transport,
        clock=clock,
        sleep=sleep,
    )

    await first.get("/status/j-1", use_cache=True)
    first.set_config(max_retries=0)

    assert first.cache_stats().total_entries == 1
    assert second.cache_stats().total_entries == 0
    assert second.get_config().max_retries == 3
    await first.dispose()
    await second.dispose()


def test_page_token_is_read_when_client_is_built(server: FakeServer) -> None:
    api = build_api_client(
        page_html="<html><head></head></html>",
        cookie_header="csrf-token=cookie-token",
        transport=server.transport,
    )

    assert api.credentials.csrf_token == "cookie-token"
