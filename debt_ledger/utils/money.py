"""Money conversion between decimal amounts and integer cents"""

from decimal import Decimal, InvalidOperation
from typing import Union

from debt_ledger.domain.exceptions import ValidationError

CENTS = Decimal("0.01")


def to_cents(amount: Union[Decimal, str, int]) -> int:
    """
    Convert a decimal amount to integer cents.

    Amounts with more than two fractional digits are rejected rather than
    rounded, so the stored value is always exactly what the caller sent.

    Example:
        Decimal("123.45") -> 12345
        "500" -> 50000
    """
    if isinstance(amount, float) or isinstance(amount, bool):
        raise ValidationError("Amounts must be decimal, not float")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {amount!r}") from None

    if not value.is_finite():
        raise ValidationError(f"Invalid amount: {amount!r}")
    if value != value.quantize(CENTS):
        raise ValidationError("Amounts may have at most two decimal places")

    return int(value.quantize(CENTS) * 100)


def from_cents(cents: int) -> Decimal:
    """Integer cents back to a two-place decimal (12345 -> Decimal('123.45'))"""
    return (Decimal(cents) / 100).quantize(CENTS)
