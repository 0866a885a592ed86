"""HTTP request execution for infrastructure.

Usage example:
    import httpx

    from pdf_service_client.infrastructure.credentials import CredentialProvider
    from pdf_service_client.infrastructure.http import RequestExecutor
    from pdf_service_client.types import JsonBody

    executor = RequestExecutor(client=httpx.AsyncClient(), credentials=CredentialProvider())
    envelope = await executor.execute(
        "POST",
        "http://localhost:3000/convert",
        body=JsonBody({"html": "<h1>Hi</h1>"}),
        headers={"Accept": "application/json"},
        timeout_seconds=30.0,
    )
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import httpx

from ..exceptions import DecodeError, RequestTimeoutError, ServerError, TransportError
from ..observability import get_logger
from ..protocols import Credentials, ProgressCallback
from ..types import JsonBody, MultipartBody, RawBody, RequestBody, ResponseEnvelope

logger = get_logger("pdf_service_client.infrastructure.http")

JSON_CONTENT_TYPE = "application/json"


def _drop_header(headers: dict[str, str], name: str) -> None:
    lowered = name.lower()
    for key in [k for k in headers if k.lower() == lowered]:
        del headers[key]


def encode_body(body: RequestBody | None, headers: dict[str, str]) -> dict[str, Any]:
    """Return httpx request arguments for `body`, adjusting `headers` in place.

    Multipart bodies drop any Content-Type so the transport can set the boundary.
    JSON bodies get `application/json` unless the caller already chose a type.
    """
    if body is None:
        return {}
    if isinstance(body, MultipartBody):
        _drop_header(headers, "Content-Type")
        files = {
            name: (part.filename, part.content, part.content_type)
            for name, part in body.files.items()
        }
        return {"files": files, "data": dict(body.fields)}
    if isinstance(body, JsonBody):
        if not any(key.lower() == "content-type" for key in headers):
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return {"content": json.dumps(body.value)}
    if isinstance(body, RawBody):
        return {"content": body.content}
    raise TypeError(f"Unsupported request body: {type(body).__name__}")


def decode_body(response: httpx.Response) -> object:
    """Decode a response according to its declared content type.

    JSON types parse to Python objects, text types to `str`, anything else stays `bytes`.
    """
    content_type = response.headers.get("content-type", "")
    if JSON_CONTENT_TYPE in content_type:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(JSON_CONTENT_TYPE, response.status_code) from exc
    if "text/" in content_type:
        return response.text
    return response.content


def build_envelope(response: httpx.Response, data: object) -> ResponseEnvelope:
    return ResponseEnvelope(
        success=response.is_success,
        data=data,
        status=response.status_code,
        status_text=response.reason_phrase,
        headers=MappingProxyType({key.lower(): value for key, value in response.headers.items()}),
    )


class RequestExecutor:
    """Performs one attempt: encode, send under a timeout, observe credentials, decode.

    Outcomes:
    - 2xx and 4xx responses return an envelope (`success` reflects the status)
    - 5xx responses raise ServerError carrying the envelope, so they can be retried
    - No response raises TransportError (RequestTimeoutError for timeouts)
    - An undecodable body raises DecodeError
    """

    def __init__(self, *, client: httpx.AsyncClient, credentials: Credentials) -> None:
        self.client = client
        self.credentials = credentials

    async def execute(
        self,
        method: str,
        url: str,
        *,
        body: RequestBody | None = None,
        headers: Mapping[str, str] | None = None,
        timeout_seconds: float,
        on_progress: ProgressCallback | None = None,
    ) -> ResponseEnvelope:
        request_headers = dict(headers or {})
        request_args = encode_body(body, request_headers)
        request = self.client.build_request(
            method,
            url,
            headers=request_headers,
            timeout=timeout_seconds,
            **request_args,
        )
        total_bytes = int(request.headers.get("content-length", "0") or 0)
        if on_progress is not None:
            on_progress(0, total_bytes)

        # Fresh cancellation scope per attempt; retries never share a timer.
        try:
            async with asyncio.timeout(timeout_seconds):
                response = await self.client.send(request)
        except (TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("%s %s timed out after %.3fs", method, url, timeout_seconds)
            raise RequestTimeoutError(timeout_seconds) from exc
        except httpx.TransportError as exc:
            logger.warning("%s %s failed without a response: %s", method, url, exc)
            raise TransportError(str(exc) or "Network request failed") from exc

        if on_progress is not None:
            on_progress(total_bytes, total_bytes)

        self.credentials.observe(response.headers)
        data = decode_body(response)
        envelope = build_envelope(response, data)
        logger.debug("%s %s -> %d", method, url, envelope.status)

        if envelope.status >= 500:
            raise ServerError(envelope)
        return envelope
