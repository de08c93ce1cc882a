"""Client selection for submissions."""

import logging
from dataclasses import dataclass
from typing import Protocol

from fleetfox.domain.clients import ClientOption

logger = logging.getLogger(__name__)


class ClientRepository(Protocol):
    """Persistence interface for client SLA rows."""

    def list_active_clients(self) -> list[dict[str, object]]:
        """Return active client rows ordered by client id."""


@dataclass
class ClientService:
    """Lists the clients a submission can be filed under."""

    repository: ClientRepository

    def list_options(self) -> list[ClientOption]:
        """Return selectable clients; lookup failures yield an empty list."""
        try:
            rows = self.repository.list_active_clients()
        except Exception:
            logger.exception("Failed to load clients")
            return []
        options = []
        for row in rows:
            row_id = str(row.get("id") or "")
            if not row_id:
                continue
            label = str(row.get("client_id") or row_id[:8])
            options.append(ClientOption(id=row_id, label=label))
        return options
