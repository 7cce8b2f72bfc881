"""Soft-Delete Archive - retiring erroneous debts while keeping their history"""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from debt_ledger.config import settings
from debt_ledger.domain.exceptions import DomainException, NotFoundError
from debt_ledger.domain.ledger import ensure_deletable, require_text
from debt_ledger.domain.models import DebtStatus
from debt_ledger.infrastructure.database.models import Debt
from debt_ledger.infrastructure.database.repositories import DebtRepository
from debt_ledger.infrastructure.observability.metrics import debts_deleted_counter
from debt_ledger.services.transactions import atomic
from debt_ledger.utils.date_utils import utc_now


class DebtArchive:
    """
    Moves active debts to the deleted status.

    The record and its payments stay in storage for auditing. There is no
    restore operation; paid debts are closed and cannot be deleted.
    """

    def __init__(self, db: Session):
        self.db = db
        self.debts = DebtRepository(db)

    def delete_debt(self, debt_id: int, reason: str, request_id: Optional[str] = None) -> Debt:
        try:
            reason = require_text(reason, "comment")

            with atomic(self.db, debt_id):
                debt = self.debts.get_debt_for_update(debt_id, nowait=settings.lock_nowait)
                if debt is None:
                    raise NotFoundError(f"Debt {debt_id} not found")
                ensure_deletable(DebtStatus(debt.status))

                now = utc_now()
                debt.status = DebtStatus.DELETED.value
                debt.deleted_at = now
                debt.delete_comment = reason
                debt.updated_at = now
        except DomainException as e:
            logging.warning(
                f"Delete rejected: {e}",
                extra={
                    "request_id": request_id,
                    "debt_id": debt_id,
                    "step": "delete_rejected",
                    "error": e.code,
                },
            )
            raise

        debts_deleted_counter.inc()
        logging.info("Debt deleted", extra={"request_id": request_id, "debt_id": debt_id, "step": "debt_deleted"})
        return debt
