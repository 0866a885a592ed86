"""Tests for retry classification and the retry loop."""

from collections.abc import Awaitable, Callable

import pytest

from pdf_service_client.exceptions import (
    ClientRequestError,
    DecodeError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)
from pdf_service_client.infrastructure.resilience import (
    RetryPolicy,
    is_retryable_error,
    run_with_retry,
)
from pdf_service_client.types import ResponseEnvelope
from tests.fakes import RecordingSleep


def _envelope(status: int) -> ResponseEnvelope:
    return ResponseEnvelope(success=False, data=None, status=status, status_text="")


def _scripted(outcomes: list[object]) -> tuple[Callable[[], Awaitable[object]], list[int]]:
    """Return an attempt that raises or returns each outcome in turn, and its call log."""
    calls: list[int] = []

    async def attempt() -> object:
        calls.append(len(calls) + 1)
        outcome = outcomes[min(len(calls), len(outcomes)) - 1]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return attempt, calls


class TestRetryPolicy:
    """Tests for backoff arithmetic and classification."""

    def test_backoff_doubles_exactly(self) -> None:
        policy = RetryPolicy(max_retries=4, base_delay_seconds=1.0)

        delays = [policy.compute_backoff(attempt) for attempt in range(1, 5)]

        assert delays == [1.0, 2.0, 4.0, 8.0]

    def test_backoff_scales_with_base_delay(self) -> None:
        policy = RetryPolicy(base_delay_seconds=0.25)

        assert policy.compute_backoff(3) == 1.0

    @pytest.mark.parametrize(
        "error",
        [
            TransportError(),
            RequestTimeoutError(1.0),
            ServerError(_envelope(503)),
            TimeoutError(),
        ],
    )
    def test_transport_and_server_failures_are_retryable(self, error: BaseException) -> None:
        assert is_retryable_error(error) is True

    @pytest.mark.parametrize(
        "error",
        [
            ClientRequestError(_envelope(404)),
            ClientRequestError(_envelope(429)),
            DecodeError("application/json", 200),
            ValueError("bad"),
        ],
    )
    def test_other_failures_are_terminal(self, error: BaseException) -> None:
        assert is_retryable_error(error) is False

    def test_status_zero_on_unknown_error_is_retryable(self) -> None:
        error = RuntimeError("blocked")
        error.status = 0  # type: ignore[attr-defined]

        assert is_retryable_error(error) is True


class TestRunWithRetry:
    """Tests for the bounded retry loop."""

    @pytest.mark.asyncio
    async def test_returns_first_success_without_sleeping(self) -> None:
        sleep = RecordingSleep()
        attempt, calls = _scripted(["ok"])

        result = await run_with_retry(attempt, RetryPolicy(), sleep=sleep)

        assert result == "ok"
        assert calls == [1]
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_retries_until_success_with_doubling_delays(self) -> None:
        sleep = RecordingSleep()
        attempt, calls = _scripted([TransportError(), TransportError(), "ok"])

        result = await run_with_retry(
            attempt, RetryPolicy(max_retries=3, base_delay_seconds=0.5), sleep=sleep
        )

        assert result == "ok"
        assert len(calls) == 3
        assert sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_exhaustion_raises_last_error_after_max_plus_one_attempts(self) -> None:
        sleep = RecordingSleep()
        last = ServerError(_envelope(500), "last")
        attempt, calls = _scripted([ServerError(_envelope(500)), last])

        with pytest.raises(ServerError) as exc_info:
            await run_with_retry(attempt, RetryPolicy(max_retries=3), sleep=sleep)

        assert exc_info.value is last
        assert len(calls) == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_terminal_error_is_not_retried(self) -> None:
        sleep = RecordingSleep()
        attempt, calls = _scripted([ClientRequestError(_envelope(400))])

        with pytest.raises(ClientRequestError):
            await run_with_retry(attempt, RetryPolicy(max_retries=3), sleep=sleep)

        assert calls == [1]
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_zero_retries_makes_a_single_attempt(self) -> None:
        sleep = RecordingSleep()
        attempt, calls = _scripted([TransportError()])

        with pytest.raises(TransportError):
            await run_with_retry(attempt, RetryPolicy(max_retries=0), sleep=sleep)

        assert calls == [1]
