"""Supabase Auth identity provider."""

import logging
from dataclasses import dataclass

from supabase import AsyncClient

from points_tracker.services.session import IdentityProvider

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Resolves the user from config, the current session, or anonymous sign-in."""

    client: AsyncClient
    user_id: str | None = None

    async def resolve_user_id(self) -> str | None:
        """Return the configured user id or the signed-in user's id."""
        if self.user_id:
            return self.user_id
        session = await self.client.auth.get_session()
        if session is not None and session.user is not None:
            return session.user.id
        response = await self.client.auth.sign_in_anonymously()
        if response.user is None:
            return None
        _logger.info("Signed in anonymously as %s", response.user.id)
        return response.user.id
