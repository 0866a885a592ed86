"""Retry utilities for infrastructure.

Usage example:
    from pdf_service_client.infrastructure.resilience import RetryPolicy, run_with_retry

    policy = RetryPolicy(max_retries=3, base_delay_seconds=1.0)
    envelope = await run_with_retry(send_once, policy)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import override

from ..exceptions import DecodeError, ServerError, TransportError
from ..observability import get_logger
from ..protocols import RetryPolicy as RetryPolicyProtocol
from ..protocols import Sleep

logger = get_logger("pdf_service_client.infrastructure.resilience")


def is_retryable_error(error: BaseException) -> bool:
    """Classify a failed attempt.

    Timeouts, transport failures (status 0) and 5xx responses are retryable.
    Everything else, 4xx and undecodable bodies included, is terminal.
    """
    if isinstance(error, DecodeError):
        return False
    if isinstance(error, (TransportError, ServerError, TimeoutError)):
        return True
    status = getattr(error, "status", None)
    return isinstance(status, int) and (status == 0 or status >= 500)


@dataclass
class RetryPolicy(RetryPolicyProtocol):
    """Exponential backoff without jitter or cap: the delay doubles on every retry."""

    max_retries: int = 3
    base_delay_seconds: float = 1.0

    @override
    def compute_backoff(self, attempt: int) -> float:
        """Delay before retry `attempt` (1-based): base * 2**(attempt - 1)."""
        return self.base_delay_seconds * (2 ** (attempt - 1))

    @override
    def is_retryable(self, error: BaseException) -> bool:
        return is_retryable_error(error)


async def run_with_retry[ResultT](
    attempt: Callable[[], Awaitable[ResultT]],
    policy: RetryPolicyProtocol,
    *,
    sleep: Sleep = asyncio.sleep,
    label: str = "request",
) -> ResultT:
    """Run `attempt` until it succeeds, fails terminally, or retries run out.

    Makes at most `policy.max_retries + 1` attempts. When retries are exhausted
    the error from the last attempt propagates.
    """
    retries_done = 0
    while True:
        try:
            return await attempt()
        except Exception as error:
            if retries_done >= policy.max_retries or not policy.is_retryable(error):
                raise
            retries_done += 1
            delay = policy.compute_backoff(retries_done)
            logger.info(
                "%s failed (%s), retrying in %.3fs (%d retries left)",
                label,
                error,
                delay,
                policy.max_retries - retries_done + 1,
            )
            await sleep(delay)
