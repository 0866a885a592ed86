"""Typed parsing and validation for client config files."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError

_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class ClientConfigFile:
    """Validated client config values loaded from a TOML file."""

    base_url: str | None = None
    timeout_seconds: float | None = None
    max_retries: int | None = None
    retry_delay_seconds: float | None = None
    cache_ttl_seconds: float | None = None
    queue_delay_seconds: float | None = None
    default_headers: Mapping[str, str] | None = None


class _ClientSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str | None = None
    timeout_seconds: float | None = None
    max_retries: int | None = None
    retry_delay_seconds: float | None = None
    cache_ttl_seconds: float | None = None
    queue_delay_seconds: float | None = None
    default_headers: dict[str, str] | None = None

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip().rstrip("/")
        if not text.startswith(("http://", "https://")):
            raise ValueError
        return text

    @field_validator(
        "timeout_seconds",
        "retry_delay_seconds",
        "cache_ttl_seconds",
        "queue_delay_seconds",
    )
    @classmethod
    def _validate_non_negative_seconds(cls, value: float | None) -> float | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError
        return value

    @field_validator("max_retries")
    @classmethod
    def _validate_max_retries(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError
        return value


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    client: _ClientSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_client_config_file(path: Path) -> ClientConfigFile:
    """Load and validate a client TOML config file."""
    if not path.exists():
        raise ConfigFileNotFoundError(str(path))

    raw_payload = path.read_text(encoding="utf-8")
    try:
        payload: object = tomllib.loads(raw_payload)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), _format_validation_error(exc)) from exc

    section = model.client
    return ClientConfigFile(
        base_url=section.base_url,
        timeout_seconds=section.timeout_seconds,
        max_retries=section.max_retries,
        retry_delay_seconds=section.retry_delay_seconds,
        cache_ttl_seconds=section.cache_ttl_seconds,
        queue_delay_seconds=section.queue_delay_seconds,
        default_headers=section.default_headers,
    )
