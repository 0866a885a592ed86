"""Typed data contracts shared by the request pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import BinaryIO, TypedDict

CacheKey = tuple[str, str]

FileContent = bytes | BinaryIO


def _frozen_headers(headers: Mapping[str, str] | None = None) -> Mapping[str, str]:
    return MappingProxyType(dict(headers or {}))


@dataclass(frozen=True)
class ResponseEnvelope:
    """Uniform result of every completed attempt.

    `success` mirrors the transport's ok range (2xx). Non-ok statuses still
    produce an envelope; only transport failures have none.
    """

    success: bool
    data: object
    status: int
    status_text: str
    headers: Mapping[str, str] = field(default_factory=_frozen_headers)

    def message(self) -> str | None:
        """Return an error message embedded in a JSON body, if any."""
        if isinstance(self.data, Mapping):
            for key in ("message", "error"):
                value = self.data.get(key)
                if isinstance(value, str) and value:
                    return value
        return None


@dataclass(frozen=True)
class CacheEntry:
    """Cached envelope plus the monotonic time it was stored."""

    envelope: ResponseEnvelope
    stored_at: float


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache occupancy."""

    total_entries: int
    valid_entries: int
    expired_entries: int
    ttl_seconds: float


@dataclass(frozen=True)
class JsonBody:
    """Structured payload sent as JSON text."""

    value: object


@dataclass(frozen=True)
class UploadFile:
    """One file part of a multipart body."""

    content: FileContent
    filename: str = "file"
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class MultipartBody:
    """Form payload with file parts and plain field values."""

    files: Mapping[str, UploadFile] = field(default_factory=dict)
    fields: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RawBody:
    """Payload passed to the transport unmodified."""

    content: str | bytes


RequestBody = JsonBody | MultipartBody | RawBody


class ApiKeyInfo(TypedDict, total=False):
    """API key block of a stored user."""

    key: str


class StoredUser(TypedDict, total=False):
    """User record held by the host session store."""

    id: str
    email: str
    name: str
    apiKey: ApiKeyInfo
