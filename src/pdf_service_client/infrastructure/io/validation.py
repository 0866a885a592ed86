"""Pydantic-based validation helpers for inbound response payloads."""

from __future__ import annotations

from typing import TypedDict

from pydantic import TypeAdapter, ValidationError

from ...types import StoredUser


class IncomingDataError(ValueError):
    """Raised when inbound data fails validation."""


class ApiKeyInput(TypedDict, total=False):
    key: str | None


class UserInput(TypedDict, total=False):
    id: str | int | None
    email: str | None
    name: str | None
    apiKey: ApiKeyInput | None


class UserDataInput(TypedDict, total=False):
    user: UserInput | None


class UserResponseInput(TypedDict, total=False):
    success: bool
    data: UserDataInput | None
    user: UserInput | None


class JobStatusInput(TypedDict, total=False):
    jobId: str | None
    id: str | None
    status: str | None
    progress: float | int | None
    message: str | None


class JobStatus(TypedDict):
    """Normalised PDF job status."""

    job_id: str
    status: str
    progress: float | None
    message: str


def validate_as[SchemaT](schema: type[SchemaT], payload: object) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_python(payload)
    except ValidationError as exc:
        message = f"Invalid payload for {schema}."
        raise IncomingDataError(message) from exc


def _as_str(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_user(payload: object) -> StoredUser:
    """Extract the user record from `/auth/me` or `/dashboard/profile` responses.

    Both `{"data": {"user": {...}}}` and `{"user": {...}}` shapes are accepted.
    """
    response = validate_as(UserResponseInput, payload)
    data = response.get("data") or {}
    raw_user = data.get("user") or response.get("user")
    if raw_user is None:
        raise IncomingDataError("Response does not contain a user record.")
    user: StoredUser = {
        "id": _as_str(raw_user.get("id")),
        "email": _as_str(raw_user.get("email")),
        "name": _as_str(raw_user.get("name")),
    }
    api_key = (raw_user.get("apiKey") or {}).get("key")
    if api_key:
        user["apiKey"] = {"key": api_key}
    return user


def parse_job_status(payload: object, *, job_id: str) -> JobStatus:
    """Normalise a `/status/{job_id}` payload, tolerating a `data` wrapper."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        payload = payload["data"]
    status = validate_as(JobStatusInput, payload)
    progress = status.get("progress")
    return {
        "job_id": _as_str(status.get("jobId") or status.get("id")) or job_id,
        "status": _as_str(status.get("status")) or "unknown",
        "progress": None if progress is None else float(progress),
        "message": _as_str(status.get("message")),
    }
