"""Domain models - pure Python enums and dataclasses representing ledger entities"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DebtStatus(str, Enum):
    """Lifecycle of a debt: active -> paid, or active -> deleted"""

    ACTIVE = "active"
    PAID = "paid"
    DELETED = "deleted"


class Rating(str, Enum):
    """Rating given when a debt is fully repaid"""

    GOOD = "good"
    BAD = "bad"
    UNTRUSTED = "untrusted"


class Reputation(str, Enum):
    """Client reputation; NEW until the first debt is settled"""

    NEW = "new"
    GOOD = "good"
    BAD = "bad"
    UNTRUSTED = "untrusted"


class SortKey(str, Enum):
    """Sort orders accepted by the debt listing"""

    DATE_NEW = "date_new"
    DATE_OLD = "date_old"
    NAME = "name"
    AMOUNT_DESC = "amount_desc"
    AMOUNT_ASC = "amount_asc"


@dataclass
class NewClient:
    """Identity fields for a client that does not exist yet"""

    fullname: str
    phone: str
    address: str = ""


@dataclass
class PaymentDecision:
    """Outcome of validating a payment against a debt's balance"""

    paid_cents: int
    remaining_cents: int
    settles: bool
    rating: Optional[Rating]


@dataclass
class ClientCandidate:
    """Client search hit used to pick an identity for a new debt"""

    id: int
    fullname: str
    phone: str
    address: str
    photo: Optional[str]
    has_active_debt: bool
    reputation: Reputation
