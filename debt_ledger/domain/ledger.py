"""Ledger rules - pure functions deciding balances and status transitions"""

from typing import Optional, Union

from debt_ledger.domain.exceptions import (
    InvalidStateError,
    MissingRatingError,
    OverpaymentError,
    ValidationError,
)
from debt_ledger.domain.models import DebtStatus, PaymentDecision, Rating, SortKey


def require_text(value: Optional[str], field: str) -> str:
    """Return the stripped value, rejecting None and blank strings"""
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def require_positive_cents(amount_cents: int, field: str = "amount") -> int:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise ValidationError(f"{field} must be an integer number of cents")
    if amount_cents <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return amount_cents


def parse_rating(value: Union[Rating, str, None]) -> Optional[Rating]:
    if value is None or value == "":
        return None
    try:
        return Rating(value)
    except ValueError:
        raise ValidationError(f"Unknown rating: {value!r}") from None


def parse_status(value: Union[DebtStatus, str, None]) -> Optional[DebtStatus]:
    if value is None or value == "":
        return None
    try:
        return DebtStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown debt status: {value!r}") from None


def parse_sort_key(value: Union[SortKey, str, None]) -> SortKey:
    if value is None or value == "":
        return SortKey.DATE_NEW
    try:
        return SortKey(value)
    except ValueError:
        raise ValidationError(f"Unknown sort key: {value!r}") from None


def require_page(page: int, limit: int, max_limit: int) -> None:
    """Pages are 1-indexed; limit is bounded"""
    if page < 1:
        raise ValidationError("page must be 1 or greater")
    if limit < 1 or limit > max_limit:
        raise ValidationError(f"limit must be between 1 and {max_limit}")


def remaining_balance(original_cents: int, paid_total_cents: int) -> int:
    """Original amount minus everything paid so far"""
    return original_cents - paid_total_cents


def decide_payment(
    status: DebtStatus,
    original_cents: int,
    paid_total_cents: int,
    amount_cents: int,
    rating: Optional[Rating] = None,
) -> PaymentDecision:
    """
    Validate a payment against the current state of a debt.

    Rules:
    - Only active debts accept payments
    - A payment may not exceed the remaining balance (no partial credit)
    - A payment that brings the balance to exactly zero settles the debt
      and must carry a rating
    - A rating on a partial payment is ignored

    Raises:
        InvalidStateError, OverpaymentError, MissingRatingError
    """
    if status != DebtStatus.ACTIVE:
        raise InvalidStateError(f"Cannot pay a debt with status '{status.value}'")

    remaining = remaining_balance(original_cents, paid_total_cents)
    if amount_cents > remaining:
        raise OverpaymentError(amount_cents, remaining)

    new_remaining = remaining - amount_cents
    if new_remaining == 0:
        if rating is None:
            raise MissingRatingError("A rating is required for the payment that settles the debt")
        return PaymentDecision(
            paid_cents=amount_cents,
            remaining_cents=0,
            settles=True,
            rating=rating,
        )

    return PaymentDecision(
        paid_cents=amount_cents,
        remaining_cents=new_remaining,
        settles=False,
        rating=None,
    )


def ensure_deletable(status: DebtStatus) -> None:
    """Only active debts can be soft-deleted; paid and deleted records are closed"""
    if status != DebtStatus.ACTIVE:
        raise InvalidStateError(f"Cannot delete a debt with status '{status.value}'")
