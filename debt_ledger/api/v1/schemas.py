"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, Field, model_validator

from debt_ledger.domain.models import ClientCandidate, DebtStatus, NewClient, Rating, Reputation
from debt_ledger.infrastructure.database.models import Client, Debt, DebtPayment
from debt_ledger.utils.date_utils import ensure_utc
from debt_ledger.utils.money import from_cents


class CreateDebtRequest(BaseModel):
    """
    Request body for POST /v1/debts

    Either `client_id` (existing client) or `fullname` + `phone` (new client,
    `photo_data` required) must be given.
    """

    client_id: Optional[int] = Field(None, gt=0, description="Existing client to charge")
    fullname: Optional[str] = Field(None, description="New client full name")
    phone: Optional[str] = Field(None, description="New client phone")
    address: str = ""
    photo_data: Optional[str] = Field(None, description="Base64 data URL or stored /uploads/ reference")
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    comment: str = ""

    @model_validator(mode="after")
    def check_client_reference(self) -> "CreateDebtRequest":
        if self.client_id is None and not (self.fullname and self.fullname.strip()):
            raise ValueError("Either client_id or fullname is required")
        return self

    def client_ref(self) -> Union[int, NewClient]:
        if self.client_id is not None:
            return self.client_id
        return NewClient(fullname=self.fullname or "", phone=self.phone or "", address=self.address)


class RecordPaymentRequest(BaseModel):
    """Request body for POST /v1/debts/{debt_id}/payments"""

    paid_amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    comment: str = Field(..., min_length=1)
    rating: Optional[Rating] = Field(None, description="Required when the payment settles the debt")


class DeleteDebtRequest(BaseModel):
    """Request body for POST /v1/debts/{debt_id}/delete"""

    comment: str = Field(..., min_length=1, description="Reason for deletion")


class ClientSchema(BaseModel):
    """Client record"""

    id: int
    fullname: str
    phone: str
    address: str
    photo: Optional[str] = None
    reputation: Reputation
    created_at: datetime

    @classmethod
    def from_model(cls, client: Client) -> "ClientSchema":
        return cls(
            id=client.id,
            fullname=client.fullname,
            phone=client.phone,
            address=client.address,
            photo=client.photo,
            reputation=Reputation(client.reputation),
            created_at=ensure_utc(client.created_at),
        )


class ClientCandidateSchema(BaseModel):
    """Single hit of GET /v1/clients/search"""

    id: int
    fullname: str
    phone: str
    address: str
    photo: Optional[str] = None
    has_active_debt: bool
    reputation: Reputation

    @classmethod
    def from_candidate(cls, candidate: ClientCandidate) -> "ClientCandidateSchema":
        return cls(
            id=candidate.id,
            fullname=candidate.fullname,
            phone=candidate.phone,
            address=candidate.address,
            photo=candidate.photo,
            has_active_debt=candidate.has_active_debt,
            reputation=candidate.reputation,
        )


class DebtSchema(BaseModel):
    """Debt record with its current balance"""

    id: int
    client_id: int
    amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    comment: str
    status: DebtStatus
    rating: Optional[Rating] = None
    created_at: datetime
    paid_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    delete_comment: Optional[str] = None
    client: Optional[ClientSchema] = None

    @classmethod
    def from_model(cls, debt: Debt, include_client: bool = False) -> "DebtSchema":
        return cls(
            id=debt.id,
            client_id=debt.client_id,
            amount=from_cents(debt.original_cents),
            paid_amount=from_cents(debt.paid_cents),
            remaining_amount=from_cents(debt.remaining_cents),
            comment=debt.comment,
            status=DebtStatus(debt.status),
            rating=Rating(debt.rating) if debt.rating else None,
            created_at=ensure_utc(debt.created_at),
            paid_at=ensure_utc(debt.paid_at),
            deleted_at=ensure_utc(debt.deleted_at),
            delete_comment=debt.delete_comment,
            client=ClientSchema.from_model(debt.client) if include_client else None,
        )


class PaymentSchema(BaseModel):
    """Single entry of a debt's payment history"""

    id: int
    debt_id: int
    paid_amount: Decimal
    remaining_amount: Decimal
    comment: str
    created_at: datetime

    @classmethod
    def from_model(cls, payment: DebtPayment) -> "PaymentSchema":
        return cls(
            id=payment.id,
            debt_id=payment.debt_id,
            paid_amount=from_cents(payment.paid_cents),
            remaining_amount=from_cents(payment.remaining_cents),
            comment=payment.comment,
            created_at=ensure_utc(payment.created_at),
        )


class PaymentResponse(BaseModel):
    """Response for POST /v1/debts/{debt_id}/payments"""

    debt: DebtSchema
    payment: PaymentSchema


class DebtPage(BaseModel):
    """Response for GET /v1/debts"""

    data: List[DebtSchema]
    total: int


class ClientPage(BaseModel):
    """Response for GET /v1/clients"""

    data: List[ClientSchema]
    total: int
