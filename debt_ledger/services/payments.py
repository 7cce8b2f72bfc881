"""Payment Processor - the transactional core of the ledger"""

import logging
from typing import Optional, Tuple, Union
from sqlalchemy.orm import Session

from debt_ledger.config import settings
from debt_ledger.domain.exceptions import DomainException, NotFoundError
from debt_ledger.domain.ledger import (
    decide_payment,
    parse_rating,
    require_positive_cents,
    require_text,
)
from debt_ledger.domain.models import DebtStatus, Rating
from debt_ledger.infrastructure.database.models import Debt, DebtPayment
from debt_ledger.infrastructure.database.repositories import DebtRepository, PaymentRepository
from debt_ledger.infrastructure.observability.metrics import debts_settled_counter, record_payment_outcome
from debt_ledger.services.reputation import ReputationAssigner
from debt_ledger.services.transactions import atomic
from debt_ledger.utils.date_utils import utc_now


class PaymentProcessor:
    """Applies payments to debts, one serialized transaction per payment"""

    def __init__(self, db: Session):
        self.db = db
        self.debts = DebtRepository(db)
        self.payments = PaymentRepository(db)
        self.reputation = ReputationAssigner(db)

    def record_payment(
        self,
        debt_id: int,
        paid_cents: int,
        comment: str,
        rating: Union[Rating, str, None] = None,
        request_id: Optional[str] = None,
    ) -> Tuple[Debt, DebtPayment]:
        """
        Apply a partial or full payment to an active debt.

        Flow:
        1. Lock the debt row (FOR UPDATE NOWAIT where supported)
        2. Sum prior payments and validate against the remaining balance
        3. Append the payment with its remaining-balance snapshot
        4. If the balance reaches zero: mark paid, store the rating and
           update the client's reputation
        5. Commit; every failure rolls back all of the above

        Raises:
            ValidationError: Non-positive amount, empty comment, unknown rating
            NotFoundError: Unknown debt
            InvalidStateError: Debt is paid or deleted
            OverpaymentError: Amount exceeds the remaining balance
            MissingRatingError: Settling payment without a rating
            ConcurrencyError: Another write on the same debt won the race
        """
        try:
            paid_cents = require_positive_cents(paid_cents, "paid_amount")
            comment = require_text(comment, "comment")
            rating = parse_rating(rating)

            with atomic(self.db, debt_id):
                debt = self.debts.get_debt_for_update(debt_id, nowait=settings.lock_nowait)
                if debt is None:
                    raise NotFoundError(f"Debt {debt_id} not found")

                decision = decide_payment(
                    status=DebtStatus(debt.status),
                    original_cents=debt.original_cents,
                    paid_total_cents=self.payments.total_paid(debt_id),
                    amount_cents=paid_cents,
                    rating=rating,
                )

                now = utc_now()
                payment = self.payments.add_payment(
                    debt_id=debt_id,
                    paid_cents=decision.paid_cents,
                    remaining_cents=decision.remaining_cents,
                    comment=comment,
                )
                # Every payment rewrites the row so the version check applies
                debt.updated_at = now

                if decision.settles:
                    debt.status = DebtStatus.PAID.value
                    debt.paid_at = now
                    debt.rating = decision.rating.value
                    self.reputation.apply_rating(debt.client_id, decision.rating)
        except DomainException as e:
            record_payment_outcome(e.code)
            logging.warning(
                f"Payment rejected: {e}",
                extra={
                    "request_id": request_id,
                    "debt_id": debt_id,
                    "step": "payment_rejected",
                    "error": e.code,
                },
            )
            raise

        outcome = "settled" if decision.settles else "partial"
        record_payment_outcome(outcome, decision.paid_cents)
        if decision.settles:
            debts_settled_counter.labels(rating=decision.rating.value).inc()

        logging.info(
            "Payment recorded",
            extra={
                "request_id": request_id,
                "debt_id": debt_id,
                "step": "debt_settled" if decision.settles else "payment_recorded",
                "paid_cents": decision.paid_cents,
                "remaining_cents": decision.remaining_cents,
            },
        )
        return debt, payment
