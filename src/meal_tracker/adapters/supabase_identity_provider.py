"""Supabase auth-backed identity provider."""

import logging
from dataclasses import dataclass

from supabase import AuthError, Client

from meal_tracker.domain.profiles import Principal
from meal_tracker.services.identity import IdentityProvider

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Resolves Supabase access tokens to principals."""

    client: Client

    def verify_token(self, access_token: str) -> Principal | None:
        """Return the signed-in user for a token, or None when invalid."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthError as exc:
            _logger.info("Rejected access token: %s", exc)
            return None
        user = response.user if response else None
        if user is None:
            return None
        metadata = user.user_metadata or {}
        display_name = metadata.get("display_name") or metadata.get("full_name")
        return Principal(
            uid=str(user.id),
            email=user.email,
            display_name=display_name,
        )
