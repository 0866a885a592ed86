"""Endpoint-specific clients composed on top of `ApiClient`."""

from .pdf import PdfApiClient, PdfOptions
from .session import SessionApiClient

__all__ = ["PdfApiClient", "PdfOptions", "SessionApiClient"]
