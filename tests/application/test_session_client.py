"""Tests for profile lookups and logout."""

from __future__ import annotations

import pytest

from pdf_service_client.application.session import SessionApiClient
from pdf_service_client.client import ApiClient
from pdf_service_client.exceptions import ClientRequestError
from tests.fakes import FakeClock, FakeServer, RecordingSleep, json_response
from tests.support.client import make_api_client

USER_PAYLOAD = {
    "success": True,
    "data": {
        "user": {
            "id": "u-1",
            "email": "ada@example.com",
            "name": "Ada",
            "apiKey": {"key": "key-123"},
        }
    },
}


@pytest.fixture
def api(server: FakeServer, sleep: RecordingSleep, clock: FakeClock) -> ApiClient:
    return make_api_client(server, sleep=sleep, clock=clock)


@pytest.mark.asyncio
async def test_get_profile_returns_stored_user(server: FakeServer, api: ApiClient) -> None:
    server.add("GET", "/dashboard/profile", json_response(200, USER_PAYLOAD))

    user = await SessionApiClient(api).get_profile()

    assert user == {
        "id": "u-1",
        "email": "ada@example.com",
        "name": "Ada",
        "apiKey": {"key": "key-123"},
    }


@pytest.mark.asyncio
async def test_get_current_user_rejects_unauthenticated(
    server: FakeServer, api: ApiClient
) -> None:
    server.add("GET", "/auth/me", json_response(401, {}))

    with pytest.raises(ClientRequestError, match="Authentication required. Please sign in."):
        await SessionApiClient(api).get_current_user()


@pytest.mark.asyncio
async def test_logout_clears_cached_responses(server: FakeServer, api: ApiClient) -> None:
    server.add("GET", "/dashboard/profile", json_response(200, USER_PAYLOAD))
    server.add("POST", "/auth/logout", json_response(200, {"success": True}))
    await api.get("/dashboard/profile", use_cache=True)

    envelope = await SessionApiClient(api).logout()

    assert envelope.success is True
    assert api.cache_stats().total_entries == 0


@pytest.mark.asyncio
async def test_logout_failure_still_clears_cache(server: FakeServer, api: ApiClient) -> None:
    server.add("GET", "/dashboard/profile", json_response(200, USER_PAYLOAD))
    server.add("POST", "/auth/logout", json_response(403, {"message": "Invalid CSRF token"}))
    await api.get("/dashboard/profile", use_cache=True)

    envelope = await SessionApiClient(api).logout()

    assert envelope.success is False
    assert envelope.message() == "Invalid CSRF token"
    assert api.cache_stats().total_entries == 0
