"""Debt Ledger - recording debts and querying them"""

import logging
from datetime import date
from typing import List, Optional, Tuple, Union
from sqlalchemy.orm import Session

from debt_ledger.config import settings
from debt_ledger.domain.exceptions import NotFoundError, ValidationError
from debt_ledger.domain.ledger import (
    parse_sort_key,
    parse_status,
    require_page,
    require_positive_cents,
    require_text,
)
from debt_ledger.domain.models import DebtStatus, NewClient, SortKey
from debt_ledger.infrastructure.database.models import Client, Debt, DebtPayment
from debt_ledger.infrastructure.database.repositories import (
    ClientRepository,
    DebtRepository,
    PaymentRepository,
)
from debt_ledger.infrastructure.observability.metrics import debts_created_counter
from debt_ledger.infrastructure.storage.photos import PhotoStore
from debt_ledger.services.transactions import atomic


class DebtLedger:
    """Owns debt records: creation against a client, listings and payment history"""

    def __init__(self, db: Session, photo_store: PhotoStore | None = None):
        self.db = db
        self.photo_store = photo_store or PhotoStore()
        self.clients = ClientRepository(db)
        self.debts = DebtRepository(db)
        self.payments = PaymentRepository(db)

    def create_debt(
        self,
        client_ref: Union[int, NewClient],
        amount_cents: int,
        comment: str = "",
        photo: Optional[str] = None,
    ) -> Debt:
        """
        Record a new active debt.

        client_ref is either the id of an existing client or the identity of a
        new one. New clients must be photographed; for existing clients a
        supplied photo replaces the stored one.

        Raises:
            ValidationError: Bad amount, missing client fields or missing photo
            NotFoundError: client_ref names an unknown client id
        """
        amount_cents = require_positive_cents(amount_cents, "amount")
        comment = (comment or "").strip()
        photo = photo.strip() if photo else None

        if isinstance(client_ref, NewClient):
            new_client = NewClient(
                fullname=require_text(client_ref.fullname, "fullname"),
                phone=require_text(client_ref.phone, "phone"),
                address=(client_ref.address or "").strip(),
            )
            if not photo:
                raise ValidationError("A photo is required for a new client")
        elif isinstance(client_ref, int) and not isinstance(client_ref, bool):
            new_client = None
        else:
            raise ValidationError("client_ref must be a client id or new client details")

        with atomic(self.db):
            if new_client is not None:
                reference = self.photo_store.store(photo, new_client.fullname)
                client = self.clients.create_client(new_client, photo=reference)
            else:
                client = self._existing_client(client_ref, photo)

            debt = self.debts.create_debt(client.id, amount_cents, comment)

        debts_created_counter.labels(client="new" if new_client else "existing").inc()
        logging.info(
            "Debt created",
            extra={
                "debt_id": debt.id,
                "client_id": debt.client_id,
                "step": "debt_created",
                "amount_cents": amount_cents,
            },
        )
        return debt

    def _existing_client(self, client_id: int, photo: Optional[str]) -> Client:
        client = self.clients.get_client(client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} not found")
        if photo:
            client.photo = self.photo_store.store(photo, client.fullname)
        return client

    def get_debt(self, debt_id: int) -> Debt:
        debt = self.debts.get_debt(debt_id)
        if debt is None:
            raise NotFoundError(f"Debt {debt_id} not found")
        return debt

    def list_debts(
        self,
        status: Union[DebtStatus, str, None] = None,
        search: Optional[str] = None,
        day: Optional[date] = None,
        sort_by: Union[SortKey, str, None] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Tuple[List[Debt], int]:
        """
        Page through debts.

        The active, paid and deleted listings are disjoint: a status filter
        returns only debts currently in that status.
        """
        limit = limit or settings.debts_page_size
        require_page(page, limit, settings.max_page_size)
        return self.debts.list_debts(
            status=parse_status(status),
            search=search.strip() if search else None,
            day=day,
            sort_key=parse_sort_key(sort_by),
            page=page,
            limit=limit,
        )

    def get_debts_for_client(
        self,
        client_id: int,
        status: Union[DebtStatus, str, None] = None,
    ) -> List[Debt]:
        if self.clients.get_client(client_id) is None:
            raise NotFoundError(f"Client {client_id} not found")
        return self.debts.get_debts_for_client(
            client_id,
            parse_status(status),
            limit=settings.client_debts_limit,
        )

    def list_payments(self, debt_id: int) -> List[DebtPayment]:
        """Payment history of a debt in any status, oldest first"""
        self.get_debt(debt_id)
        return self.payments.list_for_debt(debt_id)
