"""Custom exceptions for the PDF service client.

Failures are split by whether a response was obtained:

- TransportError: no response (timeout, cancellation, network failure). Status 0.
- HttpStatusError: a response arrived with a non-ok status. ServerError covers
  5xx, ClientRequestError everything else.
- DecodeError: the body could not be read as its declared content type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import ResponseEnvelope


class ApiClientError(Exception):
    """Base exception for all client errors."""

    pass


class TransportError(ApiClientError):
    """Raised when no response was obtained.

    Offline, DNS and blocked requests are indistinguishable here; all carry
    status 0.
    """

    status = 0

    def __init__(self, message: str = "Network request failed") -> None:
        super().__init__(message)


class RequestTimeoutError(TransportError):
    """Raised when an attempt's cancellation scope expires."""

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__("Request timeout")


class HttpStatusError(ApiClientError):
    """Raised for a completed response with a non-ok status."""

    def __init__(self, envelope: ResponseEnvelope, message: str | None = None) -> None:
        self.envelope = envelope
        self.status = envelope.status
        super().__init__(message or f"HTTP {envelope.status} {envelope.status_text}".strip())


class ServerError(HttpStatusError):
    """Raised for 5xx responses. Retried before it reaches the caller."""

    pass


class ClientRequestError(HttpStatusError):
    """Raised for 4xx (and other non-retryable non-ok) responses."""

    pass


class DecodeError(ApiClientError):
    """Raised when a response body does not match its declared content type."""

    def __init__(self, content_type: str, status: int) -> None:
        self.content_type = content_type
        self.status = status
        super().__init__(f"Could not decode response body as {content_type} (status {status}).")


class QueueClosedError(ApiClientError):
    """Raised for queued requests that were pending when the queue closed."""

    def __init__(self) -> None:
        super().__init__("Request queue was closed before the request ran.")


class ClientDisposedError(ApiClientError):
    """Raised when a client is used after dispose()."""

    def __init__(self) -> None:
        super().__init__("API client has been disposed.")


class ConfigFileNotFoundError(ApiClientError):
    """Raised when a config file path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(ApiClientError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} could not be parsed: {detail}")


class ConfigFileValidationError(ApiClientError):
    """Raised when a config file fails schema validation."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is invalid: {detail}")
