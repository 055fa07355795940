"""Identity lookups for signed-in users."""

from typing import Protocol

from meal_tracker.domain.profiles import Principal


class IdentityProvider(Protocol):
    """Interface for resolving access tokens to principals."""

    def verify_token(self, access_token: str) -> Principal | None:
        """Return the principal for a valid token, or None."""


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
