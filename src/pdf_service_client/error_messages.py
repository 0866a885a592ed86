"""User-facing error messages for failed API calls.

The host UI renders these; this module only produces the text.
"""

from __future__ import annotations

from .exceptions import ClientRequestError, HttpStatusError, ServerError
from .types import ResponseEnvelope

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

STATUS_MESSAGES: dict[int, str] = {
    400: "Invalid request. Please check your input.",
    401: "Authentication required. Please sign in.",
    403: "Access denied. You don't have permission to perform this action.",
    404: "Resource not found.",
    429: "Too many requests. Please try again later.",
    500: "Server error. Please try again later.",
}


def message_for_status(status: int) -> str:
    return STATUS_MESSAGES.get(status, GENERIC_ERROR_MESSAGE)


def format_error_message(error: BaseException | ResponseEnvelope | str | None) -> str:
    """Translate a failure into a short message for the user.

    A message embedded in the response body wins, then the fixed text for a
    well-known status, then the generic fallback. Errors without a response
    (timeouts, network failures) use their own message.
    """
    if isinstance(error, str):
        return error
    if isinstance(error, ResponseEnvelope):
        envelope: ResponseEnvelope | None = error
    else:
        envelope = getattr(error, "envelope", None)
    if isinstance(envelope, ResponseEnvelope):
        return envelope.message() or message_for_status(envelope.status)
    if isinstance(error, BaseException):
        text = str(error)
        if text:
            return text
        status = getattr(error, "status", None)
        if isinstance(status, int) and status:
            return message_for_status(status)
    return GENERIC_ERROR_MESSAGE


def error_for_envelope(envelope: ResponseEnvelope) -> HttpStatusError:
    """Build the exception for a non-ok envelope, carrying the user-facing message."""
    message = format_error_message(envelope)
    if envelope.status >= 500:
        return ServerError(envelope, message)
    return ClientRequestError(envelope, message)
