"""Data access layer for clients, debts and payments"""

from datetime import date
from typing import List, Optional, Tuple
from sqlalchemy import exists, func, or_
from sqlalchemy.orm import Session, contains_eager, defer
from debt_ledger.infrastructure.database.models import Client, Debt, DebtPayment
from debt_ledger.domain.models import DebtStatus, NewClient, SortKey
from debt_ledger.utils.date_utils import day_bounds


def like_pattern(text: str) -> str:
    """Substring LIKE pattern with wildcard characters escaped"""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ClientRepository:
    """Repository for clients"""

    def __init__(self, db: Session):
        self.db = db

    def create_client(self, new_client: NewClient, photo: Optional[str]) -> Client:
        db_client = Client(
            fullname=new_client.fullname,
            phone=new_client.phone,
            address=new_client.address,
            photo=photo,
        )
        self.db.add(db_client)
        self.db.flush()  # Get ID without committing
        return db_client

    def get_client(self, client_id: int) -> Optional[Client]:
        return self.db.query(Client).filter(Client.id == client_id).first()

    def search_by_name(self, query: str, limit: int) -> List[Tuple[Client, bool]]:
        """Case-insensitive substring match on fullname, with an active-debt flag per client"""
        has_active_debt = (
            exists()
            .where(Debt.client_id == Client.id)
            .where(Debt.status == DebtStatus.ACTIVE.value)
            .correlate(Client)
            .label("has_active_debt")
        )
        rows = (
            self.db.query(Client, has_active_debt)
            .filter(Client.fullname.ilike(like_pattern(query), escape="\\"))
            .order_by(Client.fullname.asc(), Client.id.asc())
            .limit(limit)
            .all()
        )
        return [(client, bool(active)) for client, active in rows]

    def list_clients(
        self,
        search: Optional[str],
        day: Optional[date],
        page: int,
        limit: int,
    ) -> Tuple[List[Client], int]:
        """Paginated clients, newest first; search covers name, phone and address"""
        query = self.db.query(Client)

        if search:
            pattern = like_pattern(search)
            query = query.filter(
                or_(
                    Client.fullname.ilike(pattern, escape="\\"),
                    Client.phone.ilike(pattern, escape="\\"),
                    Client.address.ilike(pattern, escape="\\"),
                )
            )

        if day is not None:
            start, end = day_bounds(day)
            query = query.filter(Client.created_at >= start, Client.created_at < end)

        total = query.count()
        items = (
            query.order_by(Client.created_at.desc(), Client.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total


class DebtRepository:
    """Repository for debts"""

    def __init__(self, db: Session):
        self.db = db

    def create_debt(self, client_id: int, original_cents: int, comment: str) -> Debt:
        db_debt = Debt(
            client_id=client_id,
            original_cents=original_cents,
            comment=comment,
            status=DebtStatus.ACTIVE.value,
        )
        self.db.add(db_debt)
        self.db.flush()
        return db_debt

    def get_debt(self, debt_id: int) -> Optional[Debt]:
        return self.db.query(Debt).filter(Debt.id == debt_id).first()

    def get_debt_for_update(self, debt_id: int, nowait: bool = True) -> Optional[Debt]:
        """
        Fetch a debt and lock its row for the rest of the transaction.

        NOWAIT makes a competing writer fail immediately instead of queueing.
        The payment sum is deferred so the locked SELECT has no aggregate.
        """
        return (
            self.db.query(Debt)
            .options(defer(Debt.paid_cents))
            .filter(Debt.id == debt_id)
            .with_for_update(nowait=nowait, of=Debt)
            .populate_existing()
            .first()
        )

    def list_debts(
        self,
        status: Optional[DebtStatus],
        search: Optional[str],
        day: Optional[date],
        sort_key: SortKey,
        page: int,
        limit: int,
    ) -> Tuple[List[Debt], int]:
        """
        Filtered, sorted page of debts joined with their clients.

        For the deleted listing the date filter and the date orderings use
        deleted_at; everywhere else they use created_at. Every ordering ends
        with the primary key so pages never overlap.
        """
        query = self.db.query(Debt).join(Debt.client)

        if status is not None:
            query = query.filter(Debt.status == status.value)

        if search:
            query = query.filter(Client.fullname.ilike(like_pattern(search), escape="\\"))

        date_column = Debt.deleted_at if status == DebtStatus.DELETED else Debt.created_at
        if day is not None:
            start, end = day_bounds(day)
            query = query.filter(date_column >= start, date_column < end)

        total = query.count()

        if sort_key == SortKey.DATE_OLD:
            ordering = (date_column.asc(), Debt.id.asc())
        elif sort_key == SortKey.NAME:
            ordering = (Client.fullname.asc(), Debt.id.desc())
        elif sort_key == SortKey.AMOUNT_DESC:
            ordering = (Debt.original_cents.desc(), Debt.id.desc())
        elif sort_key == SortKey.AMOUNT_ASC:
            ordering = (Debt.original_cents.asc(), Debt.id.asc())
        else:
            ordering = (date_column.desc(), Debt.id.desc())

        items = (
            query.options(contains_eager(Debt.client))
            .order_by(*ordering)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def get_debts_for_client(
        self,
        client_id: int,
        status: Optional[DebtStatus],
        limit: int,
    ) -> List[Debt]:
        query = self.db.query(Debt).filter(Debt.client_id == client_id)
        if status is not None:
            query = query.filter(Debt.status == status.value)
        return query.order_by(Debt.created_at.desc(), Debt.id.desc()).limit(limit).all()


class PaymentRepository:
    """Repository for the append-only payment history"""

    def __init__(self, db: Session):
        self.db = db

    def add_payment(
        self,
        debt_id: int,
        paid_cents: int,
        remaining_cents: int,
        comment: str,
    ) -> DebtPayment:
        db_payment = DebtPayment(
            debt_id=debt_id,
            paid_cents=paid_cents,
            remaining_cents=remaining_cents,
            comment=comment,
        )
        self.db.add(db_payment)
        return db_payment

    def total_paid(self, debt_id: int) -> int:
        """Sum of all payments recorded against a debt"""
        total = (
            self.db.query(func.coalesce(func.sum(DebtPayment.paid_cents), 0))
            .filter(DebtPayment.debt_id == debt_id)
            .scalar()
        )
        return int(total)

    def list_for_debt(self, debt_id: int) -> List[DebtPayment]:
        """Payment history, oldest first"""
        return (
            self.db.query(DebtPayment)
            .filter(DebtPayment.debt_id == debt_id)
            .order_by(DebtPayment.created_at.asc(), DebtPayment.id.asc())
            .all()
        )
