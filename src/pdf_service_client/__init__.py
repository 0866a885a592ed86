"""Request orchestration for the PDF service API.

Usage example:
    from pdf_service_client import PdfApiClient, build_api_client

    async with build_api_client(session=session_store, page_html=html) as api:
        job = await PdfApiClient(api).generate_pdf("<h1>Invoice</h1>")
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .application import PdfApiClient, PdfOptions, SessionApiClient
from .client import ApiClient
from .composition import build_api_client
from .config import ClientConfig, ConfigStore
from .error_messages import format_error_message
from .exceptions import (
    ApiClientError,
    ClientRequestError,
    HttpStatusError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)
from .types import ResponseEnvelope

_PACKAGE_NAME = "pdf-service-client"


def _resolve_version() -> str:
    try:
        return version(_PACKAGE_NAME)
    except PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _resolve_version()

__all__ = [
    "ApiClient",
    "ApiClientError",
    "ClientConfig",
    "ClientRequestError",
    "ConfigStore",
    "HttpStatusError",
    "PdfApiClient",
    "PdfOptions",
    "RequestTimeoutError",
    "ResponseEnvelope",
    "ServerError",
    "SessionApiClient",
    "TransportError",
    "__version__",
    "build_api_client",
    "format_error_message",
]
