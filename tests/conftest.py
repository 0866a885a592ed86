"""Pytest fixtures for the client test suite.

All tests are network-isolated - socket connections are blocked by default.
"""

from __future__ import annotations

import socket

import pytest

from tests.fakes import FakeClock, FakeServer, FakeSessionStore, RecordingSleep
from tests.support.errors import NetworkIsolationError

# =============================================================================
# Network Isolation - Block all socket connections in tests
# =============================================================================


def _blocked_socket_connect(self, *args, **kwargs):
    """Raise an error if any test tries to make a real network connection."""
    raise NetworkIsolationError(str(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch):
    """Block all network access in tests.

    Tests that need HTTP should pass `FakeServer().transport` (an
    `httpx.MockTransport`) to the client under test.

    If you need E2E tests with real network access, mark them with:
        @pytest.mark.e2e
    and run them separately with: pytest -m e2e
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    yield


@pytest.fixture(autouse=True)
def clear_client_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer PDF_CLIENT_* settings out of config tests.

    Setting before deleting records the original value, so anything a test
    loads from a .env file is removed again afterwards.
    """
    for name in (
        "PDF_CLIENT_BASE_URL",
        "PDF_CLIENT_TIMEOUT_SECONDS",
        "PDF_CLIENT_MAX_RETRIES",
        "PDF_CLIENT_RETRY_DELAY_SECONDS",
        "PDF_CLIENT_CACHE_TTL_SECONDS",
        "PDF_CLIENT_QUEUE_DELAY_SECONDS",
        "PDF_CLIENT_LOG_LEVEL",
    ):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep(clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(clock=clock)


@pytest.fixture
def session() -> FakeSessionStore:
    return FakeSessionStore(
        user={"id": "u-1", "email": "ada@example.com", "name": "Ada", "apiKey": {"key": "key-123"}}
    )
