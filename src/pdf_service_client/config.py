"""Centralised, injectable configuration for the PDF service client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Self

from dotenv import load_dotenv

from .config_file import ClientConfigFile

DEFAULT_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
)


class NonNegativeNumberEnvVarError(ValueError):
    """Raised when an environment variable must be a non-negative number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a non-negative number.")


class NonNegativeIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be a non-negative integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a non-negative integer.")


def _default_headers() -> Mapping[str, str]:
    return DEFAULT_HEADERS


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration record for one API client.

    Load from environment with `ClientConfig.from_env()` or construct directly for testing.
    """

    base_url: str = "http://localhost:3000"
    timeout_seconds: float = 30.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    cache_ttl_seconds: float = 300.0
    queue_delay_seconds: float = 0.1
    default_headers: Mapping[str, str] = field(default_factory=_default_headers)

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_headers", MappingProxyType(dict(self.default_headers)))

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            ClientConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            base_url=os.getenv("PDF_CLIENT_BASE_URL", "").strip().rstrip("/")
            or "http://localhost:3000",
            timeout_seconds=_parse_non_negative_float(
                os.getenv("PDF_CLIENT_TIMEOUT_SECONDS", "30"),
                env_name="PDF_CLIENT_TIMEOUT_SECONDS",
            ),
            max_retries=_parse_non_negative_int(
                os.getenv("PDF_CLIENT_MAX_RETRIES", "3"),
                env_name="PDF_CLIENT_MAX_RETRIES",
            ),
            retry_delay_seconds=_parse_non_negative_float(
                os.getenv("PDF_CLIENT_RETRY_DELAY_SECONDS", "1"),
                env_name="PDF_CLIENT_RETRY_DELAY_SECONDS",
            ),
            cache_ttl_seconds=_parse_non_negative_float(
                os.getenv("PDF_CLIENT_CACHE_TTL_SECONDS", "300"),
                env_name="PDF_CLIENT_CACHE_TTL_SECONDS",
            ),
            queue_delay_seconds=_parse_non_negative_float(
                os.getenv("PDF_CLIENT_QUEUE_DELAY_SECONDS", "0.1"),
                env_name="PDF_CLIENT_QUEUE_DELAY_SECONDS",
            ),
        )

    def with_overrides(
        self,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        retry_delay_seconds: float | None = None,
        cache_ttl_seconds: float | None = None,
        queue_delay_seconds: float | None = None,
        default_headers: Mapping[str, str] | None = None,
    ) -> Self:
        """Return a new config with the given fields replaced; None keeps the current value."""
        return replace(
            self,
            base_url=self.base_url if base_url is None else base_url.rstrip("/"),
            timeout_seconds=self.timeout_seconds if timeout_seconds is None else timeout_seconds,
            max_retries=self.max_retries if max_retries is None else max_retries,
            retry_delay_seconds=self.retry_delay_seconds
            if retry_delay_seconds is None
            else retry_delay_seconds,
            cache_ttl_seconds=self.cache_ttl_seconds
            if cache_ttl_seconds is None
            else cache_ttl_seconds,
            queue_delay_seconds=self.queue_delay_seconds
            if queue_delay_seconds is None
            else queue_delay_seconds,
            default_headers=self.default_headers if default_headers is None else default_headers,
        )

    def with_file_overrides(self, file_config: ClientConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        return self.with_overrides(
            base_url=file_config.base_url,
            timeout_seconds=file_config.timeout_seconds,
            max_retries=file_config.max_retries,
            retry_delay_seconds=file_config.retry_delay_seconds,
            cache_ttl_seconds=file_config.cache_ttl_seconds,
            queue_delay_seconds=file_config.queue_delay_seconds,
            default_headers=file_config.default_headers,
        )


class ConfigStore:
    """Mutable holder of the current `ClientConfig`.

    Readers get the current immutable record, so a request that captured it keeps
    its timeout and retry values even if `set()` runs while it is in flight.
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        self._config = config or ClientConfig()

    def get(self) -> ClientConfig:
        return self._config

    def set(
        self,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        retry_delay_seconds: float | None = None,
        cache_ttl_seconds: float | None = None,
        queue_delay_seconds: float | None = None,
        default_headers: Mapping[str, str] | None = None,
    ) -> ClientConfig:
        """Merge the provided fields into the current config and return it."""
        self._config = self._config.with_overrides(
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
            retry_delay_seconds=retry_delay_seconds,
            cache_ttl_seconds=cache_ttl_seconds,
            queue_delay_seconds=queue_delay_seconds,
            default_headers=default_headers,
        )
        return self._config


def _parse_non_negative_float(value: str, *, env_name: str) -> float:
    """Parse a non-negative float from an environment variable."""
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise NonNegativeNumberEnvVarError(env_name) from exc
    if parsed < 0:
        raise NonNegativeNumberEnvVarError(env_name)
    return parsed


def _parse_non_negative_int(value: str, *, env_name: str) -> int:
    """Parse a non-negative integer from an environment variable."""
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise NonNegativeIntegerEnvVarError(env_name) from exc
    if parsed < 0:
        raise NonNegativeIntegerEnvVarError(env_name)
    return parsed
