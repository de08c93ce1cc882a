"""Resolution of the submitter identity."""

import logging
from dataclasses import dataclass
from typing import Protocol

from fleetfox.services.notifications import Role

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Interface to the hosted auth and users table."""

    def get_user_id(self, access_token: str) -> str | None:
        """Return the user id behind an access token, if valid."""

    def get_profile(self, user_id: str) -> dict[str, object] | None:
        """Return the users-table row for a user, if present."""


@dataclass(frozen=True)
class Identity:
    """Who is using a session; ``user_id`` is None for guests."""

    user_id: str | None
    role: Role = Role.FOX
    client_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Whether the identity came from a valid access token."""
        return self.user_id is not None


GUEST = Identity(user_id=None)


@dataclass
class IdentityService:
    """Resolves access tokens to identities, defaulting to guest."""

    provider: IdentityProvider

    def resolve(self, access_token: str | None) -> Identity:
        """Resolve a bearer token; failures fall back to a guest identity."""
        if not access_token:
            return GUEST
        try:
            user_id = self.provider.get_user_id(access_token)
        except Exception:
            logger.warning("Failed to resolve access token", exc_info=True)
            return GUEST
        if not user_id:
            return GUEST
        role, client_id = self._load_profile(user_id)
        return Identity(user_id=user_id, role=role, client_id=client_id)

    def _load_profile(self, user_id: str) -> tuple[Role, str | None]:
        try:
            profile = self.provider.get_profile(user_id)
        except Exception:
            logger.warning(
                "Error fetching user role; defaulting to fox",
                extra={"user_id": user_id},
                exc_info=True,
            )
            return Role.FOX, None
        if not profile:
            return Role.FOX, None
        try:
            role = Role(str(profile.get("role") or Role.FOX.value))
        except ValueError:
            role = Role.FOX
        client_id = profile.get("client_id")
        return role, str(client_id) if client_id else None
