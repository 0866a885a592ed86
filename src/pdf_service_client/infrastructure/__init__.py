"""Concrete infrastructure implementations and shared helpers."""

from .cache import MemoryCache
from .credentials import CredentialProvider
from .http import RequestExecutor
from .queue import SerialQueue
from .resilience import RetryPolicy, is_retryable_error, run_with_retry

__all__ = [
    "CredentialProvider",
    "MemoryCache",
    "RequestExecutor",
    "RetryPolicy",
    "SerialQueue",
    "is_retryable_error",
    "run_with_retry",
]
