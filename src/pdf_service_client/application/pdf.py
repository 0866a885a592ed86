"""PDF generation client built on the request pipeline.

Generation is resource-heavy on the server, so every generation request goes
through the serial queue: one at a time, in submission order.

Usage example:
    from pdf_service_client.application.pdf import PdfApiClient, PdfOptions

    pdf_api = PdfApiClient(api)
    result = await pdf_api.generate_pdf("<h1>Invoice</h1>", orientation="landscape")
    status = await pdf_api.get_pdf_status(result.data["jobId"])
    pdf_bytes = await pdf_api.download_pdf(result.data["jobId"])
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from urllib.parse import quote

from ..client import ApiClient
from ..error_messages import error_for_envelope
from ..infrastructure.io.validation import JobStatus, parse_job_status
from ..types import ResponseEnvelope

CONVERT_ENDPOINT = "/convert"
CONVERT_URL_ENDPOINT = "/convert-url"
STATUS_ENDPOINT = "/status/{job_id}"
DOWNLOAD_ENDPOINT = "/download/{job_id}"

_WIRE_NAMES = {
    "compress": "compress",
    "format": "format",
    "orientation": "orientation",
    "margin": "margin",
    "display_header_footer": "displayHeaderFooter",
    "header_template": "headerTemplate",
    "footer_template": "footerTemplate",
    "print_background": "printBackground",
    "scale": "scale",
}


@dataclass(frozen=True)
class PdfOptions:
    """Page and rendering options for a generation request."""

    compress: bool = False
    format: str = "A4"
    orientation: str = "portrait"
    margin: str | Mapping[str, str] = "1cm"
    display_header_footer: bool = False
    header_template: str = ""
    footer_template: str = ""
    print_background: bool = True
    scale: float = 1

    def to_payload(self) -> dict[str, object]:
        """Return the options keyed by the server's camelCase names."""
        payload: dict[str, object] = {}
        for name, value in asdict(self).items():
            payload[_WIRE_NAMES[name]] = dict(value) if isinstance(value, Mapping) else value
        return payload


def merge_pdf_options(options: PdfOptions | None = None, **overrides: object) -> PdfOptions:
    """Layer caller overrides over defaults (or over `options`).

    Unknown option names raise TypeError.
    """
    return replace(options or PdfOptions(), **overrides)


def _job_path(template: str, job_id: str) -> str:
    return template.format(job_id=quote(job_id, safe=""))


class PdfApiClient:
    """Domain client for the PDF conversion endpoints."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def generate_pdf(
        self, html: str, options: PdfOptions | None = None, **overrides: object
    ) -> ResponseEnvelope:
        body = {"html": html, "options": merge_pdf_options(options, **overrides).to_payload()}
        return await self.api.post(CONVERT_ENDPOINT, body, queue_request=True)

    async def generate_pdf_from_url(
        self, url: str, options: PdfOptions | None = None
    ) -> ResponseEnvelope:
        # Without options the server applies its own defaults.
        body = {"url": url, "options": options.to_payload() if options else {}}
        return await self.api.post(CONVERT_URL_ENDPOINT, body, queue_request=True)

    async def get_pdf_status(self, job_id: str) -> ResponseEnvelope:
        return await self.api.get(_job_path(STATUS_ENDPOINT, job_id), use_cache=True)

    async def get_job_status(self, job_id: str) -> JobStatus:
        """Fetch the status for `job_id` and normalise it.

        Raises:
            ClientRequestError: If the server reports a non-ok status.
            IncomingDataError: If the payload is not a status object.
        """
        envelope = await self.get_pdf_status(job_id)
        if not envelope.success:
            raise error_for_envelope(envelope)
        return parse_job_status(envelope.data, job_id=job_id)

    async def download_pdf(self, job_id: str) -> object:
        return await self.api.download_file(_job_path(DOWNLOAD_ENDPOINT, job_id))
