"""Request pipeline and verb methods for the PDF service API.

Usage example:
    from pdf_service_client.composition import build_api_client

    async with build_api_client(session=session_store) as api:
        envelope = await api.get("/dashboard/profile", use_cache=True)
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Self, TypedDict, Unpack

import httpx

from .config import ClientConfig, ConfigStore
from .error_messages import error_for_envelope
from .exceptions import ClientDisposedError, ServerError
from .infrastructure.credentials import CredentialProvider
from .infrastructure.http import RequestExecutor
from .infrastructure.queue import SerialQueue
from .infrastructure.resilience import RetryPolicy, run_with_retry
from .observability import get_logger
from .protocols import ProgressCallback, ResponseCache, Sleep
from .types import (
    CacheStats,
    FileContent,
    JsonBody,
    MultipartBody,
    RawBody,
    RequestBody,
    ResponseEnvelope,
    UploadFile,
)

logger = get_logger("pdf_service_client.client")

_MIN_SWEEP_INTERVAL_SECONDS = 1.0


class ConfigFields(TypedDict, total=False):
    """Fields accepted by `ApiClient.set_config`."""

    base_url: str
    timeout_seconds: float
    max_retries: int
    retry_delay_seconds: float
    cache_ttl_seconds: float
    queue_delay_seconds: float
    default_headers: Mapping[str, str]


class RequestOptions(TypedDict, total=False):
    """Per-call overrides accepted by every verb method."""

    headers: Mapping[str, str]
    timeout_seconds: float
    max_retries: int
    use_cache: bool
    queue_request: bool


def as_request_body(body: object) -> RequestBody | None:
    """Wrap plain values: mappings and lists become JSON, str/bytes pass through raw."""
    if body is None or isinstance(body, (JsonBody, MultipartBody, RawBody)):
        return body
    if isinstance(body, (str, bytes)):
        return RawBody(body)
    if isinstance(body, (Mapping, list, tuple, int, float, bool)):
        return JsonBody(dict(body) if isinstance(body, Mapping) else body)
    raise TypeError(f"Unsupported request body: {type(body).__name__}")


class ApiClient:
    """Governed request pipeline for one logical client.

    Each call goes through cache lookup (opted-in GETs only), the retry loop,
    and optionally the serial queue. All state (config, cache, CSRF token,
    queue) belongs to this instance, so independent clients never share it.

    Lifecycle: `init()` starts the cache sweeper, `dispose()` stops it, closes
    the queue and the HTTP client. Also usable as an async context manager.
    """

    def __init__(
        self,
        *,
        config_store: ConfigStore,
        http_client: httpx.AsyncClient,
        credentials: CredentialProvider,
        cache: ResponseCache,
        queue: SerialQueue,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config_store = config_store
        self.credentials = credentials
        self.cache = cache
        self.queue = queue
        self._http_client = http_client
        self._executor = RequestExecutor(client=http_client, credentials=credentials)
        self._sleep = sleep
        self._sweeper: asyncio.Task[None] | None = None
        self._disposed = False

    async def __aenter__(self) -> Self:
        await self.init()
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self.dispose()

    async def init(self) -> None:
        """Start the periodic cache sweep. Safe to call more than once."""
        if self._disposed:
            raise ClientDisposedError()
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_periodically(), name="cache-sweeper")
        logger.info("API client initialized for %s", self.config_store.get().base_url)

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is not None:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass
        await self.queue.close()
        await self._http_client.aclose()
        self.cache.clear()
        logger.info("API client disposed")

    async def _sweep_periodically(self) -> None:
        """Sweep stale cache entries once per TTL, timed with `asyncio.sleep`."""
        while True:
            ttl = self.config_store.get().cache_ttl_seconds
            await asyncio.sleep(ttl if ttl > 0 else _MIN_SWEEP_INTERVAL_SECONDS)
            removed = self.cache.sweep()
            if removed:
                logger.debug("Swept %d expired cache entries", removed)

    def get_config(self) -> ClientConfig:
        return self.config_store.get()

    def set_config(self, **fields: Unpack[ConfigFields]) -> ClientConfig:
        """Update named config fields; unknown names raise TypeError."""
        return self.config_store.set(**fields)

    def clear_cache(self, pattern: str | None = None) -> None:
        self.cache.clear(pattern)

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        body: object = None,
        headers: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        use_cache: bool = False,
        queue_request: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> ResponseEnvelope:
        """Run one logical request through the pipeline.

        Returns the envelope for 2xx and 4xx responses. Raises ServerError,
        TransportError or RequestTimeoutError once retries are exhausted, and
        ClientRequestError/DecodeError subclasses without retrying.
        """
        if self._disposed:
            raise ClientDisposedError()

        # Captured once: config changes after this point do not affect this request.
        config = self.config_store.get()
        method = method.upper()
        url = f"{config.base_url}{endpoint}"
        key = (method, url)
        cacheable = method == "GET" and use_cache

        if cacheable:
            entry = self.cache.lookup(key)
            if entry is not None:
                logger.debug("Cache hit for %s %s", method, url)
                return entry.envelope

        policy = RetryPolicy(
            max_retries=config.max_retries if max_retries is None else max_retries,
            base_delay_seconds=config.retry_delay_seconds,
        )
        timeout = config.timeout_seconds if timeout_seconds is None else timeout_seconds
        request_body = as_request_body(body)
        default_headers = config.default_headers

        async def attempt() -> ResponseEnvelope:
            envelope = await self._executor.execute(
                method,
                url,
                body=request_body,
                headers=self.credentials.headers_for(headers, defaults=default_headers),
                timeout_seconds=timeout,
                on_progress=on_progress,
            )
            if cacheable and envelope.success:
                self.cache.store(key, envelope)
            return envelope

        async def attempt_with_retry() -> ResponseEnvelope:
            return await run_with_retry(
                attempt, policy, sleep=self._sleep, label=f"{method} {endpoint}"
            )

        if queue_request:
            return await self.queue.enqueue(attempt_with_retry)
        return await attempt_with_retry()

    async def get(self, endpoint: str, **options: Unpack[RequestOptions]) -> ResponseEnvelope:
        return await self.request(endpoint, method="GET", **options)

    async def post(
        self, endpoint: str, body: object = None, **options: Unpack[RequestOptions]
    ) -> ResponseEnvelope:
        return await self.request(endpoint, method="POST", body=body, **options)

    async def put(
        self, endpoint: str, body: object = None, **options: Unpack[RequestOptions]
    ) -> ResponseEnvelope:
        return await self.request(endpoint, method="PUT", body=body, **options)

    async def patch(
        self, endpoint: str, body: object = None, **options: Unpack[RequestOptions]
    ) -> ResponseEnvelope:
        return await self.request(endpoint, method="PATCH", body=body, **options)

    async def delete(self, endpoint: str, **options: Unpack[RequestOptions]) -> ResponseEnvelope:
        return await self.request(endpoint, method="DELETE", **options)

    async def upload_file(
        self,
        endpoint: str,
        file: FileContent | UploadFile,
        *,
        fields: Mapping[str, object] | None = None,
        on_progress: ProgressCallback | None = None,
        **options: Unpack[RequestOptions],
    ) -> ResponseEnvelope:
        """POST `file` as the `file` part of a multipart form, plus any extra `fields`."""
        part = file if isinstance(file, UploadFile) else UploadFile(content=file)
        body = MultipartBody(
            files={"file": part},
            fields={name: str(value) for name, value in (fields or {}).items()},
        )
        return await self.request(
            endpoint, method="POST", body=body, on_progress=on_progress, **options
        )

    async def download_file(self, endpoint: str, **options: Unpack[RequestOptions]) -> object:
        """GET `endpoint` accepting any type and return the raw decoded body.

        Raises an HttpStatusError whose message comes from the body or the
        status when the response is not ok.
        """
        headers = {**options.pop("headers", {}), "Accept": "*/*"}
        try:
            envelope = await self.request(endpoint, method="GET", headers=headers, **options)
        except ServerError as exc:
            raise error_for_envelope(exc.envelope) from exc
        if not envelope.success:
            raise error_for_envelope(envelope)
        return envelope.data
