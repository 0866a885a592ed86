"""Signed-in user lookups and session termination."""

from __future__ import annotations

from ..client import ApiClient
from ..error_messages import error_for_envelope
from ..infrastructure.io.validation import parse_user
from ..observability import get_logger
from ..types import ResponseEnvelope, StoredUser

PROFILE_ENDPOINT = "/dashboard/profile"
CURRENT_USER_ENDPOINT = "/auth/me"
LOGOUT_ENDPOINT = "/auth/logout"

logger = get_logger("pdf_service_client.application.session")


class SessionApiClient:
    """Profile and session calls used by the host header and dashboard."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def _fetch_user(self, endpoint: str) -> StoredUser:
        envelope = await self.api.get(endpoint)
        if not envelope.success:
            raise error_for_envelope(envelope)
        return parse_user(envelope.data)

    async def get_profile(self) -> StoredUser:
        return await self._fetch_user(PROFILE_ENDPOINT)

    async def get_current_user(self) -> StoredUser:
        return await self._fetch_user(CURRENT_USER_ENDPOINT)

    async def logout(self) -> ResponseEnvelope:
        """End the server session and drop everything cached for the old user."""
        envelope = await self.api.post(LOGOUT_ENDPOINT)
        self.api.clear_cache()
        if not envelope.success:
            logger.warning("Logout returned status %d", envelope.status)
        return envelope
