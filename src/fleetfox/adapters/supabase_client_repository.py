"""Supabase-backed client SLA repository."""

from dataclasses import dataclass

from supabase import Client

from fleetfox.services.clients import ClientRepository


@dataclass
class SupabaseClientRepository(ClientRepository):
    """Reads selectable clients from the client_sla table."""

    client: Client

    def list_active_clients(self) -> list[dict[str, object]]:
        """Return active client rows ordered by client id."""
        response = (
            self.client.table("client_sla")
            .select("id, client_id, active")
            .eq("active", True)
            .order("client_id")
            .execute()
        )
        return list(response.data or [])
