"""Supabase Auth identity provider."""

from dataclasses import dataclass

from supabase import Client

from fleetfox.services.identity import IdentityProvider


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Resolves users through Supabase Auth and the users table."""

    client: Client

    def get_user_id(self, access_token: str) -> str | None:
        """Return the user id for a valid access token."""
        response = self.client.auth.get_user(access_token)
        if response is None or response.user is None:
            return None
        return str(response.user.id)

    def get_profile(self, user_id: str) -> dict[str, object] | None:
        """Return the users-table row, if present."""
        response = (
            self.client.table("users").select("*").eq("id", user_id).limit(1).execute()
        )
        if not response.data:
            return None
        return response.data[0]
