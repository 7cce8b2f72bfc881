"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "domain_error"


class ValidationError(DomainException):
    """Input rejected before any state change (amount, comment, photo, enum values)"""

    code = "validation_error"


class NotFoundError(DomainException):
    """Referenced debt or client does not exist"""

    code = "not_found"


class InvalidStateError(DomainException):
    """Debt is not in the status the operation requires"""

    code = "invalid_state"


class OverpaymentError(DomainException):
    """Payment exceeds the remaining balance of the debt"""

    code = "overpayment"

    def __init__(self, paid_cents: int, remaining_cents: int):
        self.paid_cents = paid_cents
        self.remaining_cents = remaining_cents
        super().__init__(
            f"Payment of {paid_cents} cents exceeds remaining balance of {remaining_cents} cents"
        )


class MissingRatingError(DomainException):
    """Payment settles the debt but no rating was supplied"""

    code = "missing_rating"


class ConcurrencyError(DomainException):
    """Concurrent write on the same debt; the caller may retry"""

    code = "concurrency_conflict"
