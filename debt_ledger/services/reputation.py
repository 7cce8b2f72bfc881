"""Reputation Assigner - client reputation from the rating of a settled debt"""

import logging
from typing import Union
from sqlalchemy.orm import Session

from debt_ledger.domain.exceptions import NotFoundError, ValidationError
from debt_ledger.domain.ledger import parse_rating
from debt_ledger.domain.models import Rating
from debt_ledger.infrastructure.database.models import Client
from debt_ledger.infrastructure.database.repositories import ClientRepository


class ReputationAssigner:
    """
    Overwrites a client's reputation with the latest settlement rating.

    Last completed debt wins: there is no averaging across a client's
    history. Earlier ratings remain readable on each paid debt. Runs inside
    the caller's transaction (flush only, never commits).
    """

    def __init__(self, db: Session):
        self.db = db
        self.clients = ClientRepository(db)

    def apply_rating(self, client_id: int, rating: Union[Rating, str]) -> Client:
        parsed = parse_rating(rating)
        if parsed is None:
            raise ValidationError("rating is required")

        client = self.clients.get_client(client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} not found")

        previous = client.reputation
        client.reputation = parsed.value
        self.db.flush()

        logging.info(
            "Reputation updated",
            extra={
                "client_id": client_id,
                "step": "reputation_updated",
                "previous": previous,
                "reputation": parsed.value,
            },
        )
        return client
