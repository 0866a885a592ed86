"""Exports for test fakes."""

from .http import FakeServer, json_response
from .resilience import FakeClock, RecordingSleep
from .session import FakeSessionStore

__all__ = [
    "FakeClock",
    "FakeServer",
    "FakeSessionStore",
    "RecordingSleep",
    "json_response",
]
