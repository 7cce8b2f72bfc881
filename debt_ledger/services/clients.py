"""Client Directory - lookup, name matching and listing of clients"""

from datetime import date
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from debt_ledger.config import settings
from debt_ledger.domain.exceptions import NotFoundError
from debt_ledger.domain.ledger import require_page, require_text
from debt_ledger.domain.models import ClientCandidate, Reputation
from debt_ledger.infrastructure.database.models import Client
from debt_ledger.infrastructure.database.repositories import ClientRepository


class ClientDirectory:
    """Read side of client identities"""

    def __init__(self, db: Session):
        self.db = db
        self.clients = ClientRepository(db)

    def get_client(self, client_id: int) -> Client:
        client = self.clients.get_client(client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} not found")
        return client

    def search_clients(self, query: str) -> List[ClientCandidate]:
        """
        Case-insensitive substring match against full names.

        Each candidate says whether the client still has an active debt and
        what their reputation is, so the caller can decide between attaching
        a debt to an existing client and creating a new one. Matching is by
        name only; two people with the same name are indistinguishable here.
        """
        query = require_text(query, "q")
        rows = self.clients.search_by_name(query, limit=settings.client_search_limit)
        return [
            ClientCandidate(
                id=client.id,
                fullname=client.fullname,
                phone=client.phone,
                address=client.address,
                photo=client.photo,
                has_active_debt=has_active_debt,
                reputation=Reputation(client.reputation),
            )
            for client, has_active_debt in rows
        ]

    def list_clients(
        self,
        search: Optional[str] = None,
        day: Optional[date] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Tuple[List[Client], int]:
        limit = limit or settings.clients_page_size
        require_page(page, limit, settings.max_page_size)
        return self.clients.list_clients(search.strip() if search else None, day, page, limit)
