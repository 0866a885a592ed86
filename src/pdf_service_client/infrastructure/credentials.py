"""CSRF token and API key handling for outgoing requests.

Usage example:
    from pdf_service_client.infrastructure.credentials import CredentialProvider

    credentials = CredentialProvider.from_page(
        html=page_html,
        cookie_header="csrf-token=abc123",
        default_headers=lambda: config_store.get().default_headers,
        session=session_store,
    )
    headers = credentials.headers_for({"Accept": "*/*"})
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from http.cookies import CookieError, SimpleCookie
from typing import Self, override

from bs4 import BeautifulSoup

from ..observability import get_logger
from ..protocols import Credentials, SessionStore

CSRF_HEADER = "X-CSRF-Token"
API_KEY_HEADER = "X-API-Key"
CSRF_META_NAME = "csrf-token"
CSRF_COOKIE_NAME = "csrf-token"

logger = get_logger("pdf_service_client.infrastructure.credentials")


def csrf_token_from_html(html: str) -> str | None:
    """Return the content of `<meta name="csrf-token">`, if present."""
    soup = BeautifulSoup(html, "lxml")
    meta = soup.find("meta", attrs={"name": CSRF_META_NAME})
    if meta is None:
        return None
    content = meta.get("content")
    if not isinstance(content, str) or not content:
        return None
    return content


def csrf_token_from_cookies(cookie_header: str) -> str | None:
    """Return the `csrf-token` cookie value from a Cookie header string."""
    cookies: SimpleCookie = SimpleCookie()
    try:
        cookies.load(cookie_header)
    except CookieError:
        return None
    morsel = cookies.get(CSRF_COOKIE_NAME)
    if morsel is None or not morsel.value:
        return None
    return morsel.value


def _no_default_headers() -> Mapping[str, str]:
    return {}


class CredentialProvider(Credentials):
    """Owns the CSRF token and reads the API key from the host session.

    Header precedence, lowest first: defaults, API key, CSRF token, custom.
    """

    def __init__(
        self,
        *,
        csrf_token: str | None = None,
        session: SessionStore | None = None,
        default_headers: Callable[[], Mapping[str, str]] = _no_default_headers,
    ) -> None:
        self._csrf_token = csrf_token
        self._session = session
        self._default_headers = default_headers

    @classmethod
    def from_page(
        cls,
        *,
        html: str | None = None,
        cookie_header: str | None = None,
        session: SessionStore | None = None,
        default_headers: Callable[[], Mapping[str, str]] = _no_default_headers,
    ) -> Self:
        """Build a provider seeded from the page's meta tag, falling back to its cookie."""
        token = None
        if html:
            token = csrf_token_from_html(html)
        if token is None and cookie_header:
            token = csrf_token_from_cookies(cookie_header)
        return cls(csrf_token=token, session=session, default_headers=default_headers)

    @property
    def csrf_token(self) -> str | None:
        return self._csrf_token

    def api_key(self) -> str | None:
        if self._session is None:
            return None
        user = self._session.get_stored_user()
        if not user:
            return None
        key = (user.get("apiKey") or {}).get("key")
        return key or None

    @override
    def headers_for(
        self,
        custom: Mapping[str, str] | None = None,
        *,
        defaults: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        headers = dict(self._default_headers() if defaults is None else defaults)
        api_key = self.api_key()
        if api_key:
            _set_header(headers, API_KEY_HEADER, api_key)
        if self._csrf_token:
            _set_header(headers, CSRF_HEADER, self._csrf_token)
        for name, value in (custom or {}).items():
            _set_header(headers, name, value)
        return headers

    @override
    def observe(self, response_headers: Mapping[str, str]) -> None:
        token = _header_value(response_headers, CSRF_HEADER)
        if token and token != self._csrf_token:
            logger.debug("CSRF token refreshed from response")
            self._csrf_token = token


def _set_header(headers: dict[str, str], name: str, value: str) -> None:
    # Header names are case-insensitive; keep a single entry per name.
    lowered = name.lower()
    for key in [k for k in headers if k.lower() == lowered]:
        del headers[key]
    headers[name] = value


def _header_value(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None
