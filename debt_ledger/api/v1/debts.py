"""/v1/debts - create, list, pay and delete debts"""

import time
import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from debt_ledger.api.dependencies import get_photo_store, get_request_id
from debt_ledger.api.errors import internal_error, to_http_exception
from debt_ledger.api.v1.schemas import (
    CreateDebtRequest,
    DebtPage,
    DebtSchema,
    DeleteDebtRequest,
    PaymentResponse,
    PaymentSchema,
    RecordPaymentRequest,
)
from debt_ledger.config import settings
from debt_ledger.domain.exceptions import DomainException
from debt_ledger.domain.models import DebtStatus, SortKey
from debt_ledger.infrastructure.database.session import get_db
from debt_ledger.infrastructure.observability.logging import log_debt_event, log_payment
from debt_ledger.infrastructure.storage.photos import PhotoStore
from debt_ledger.services.archive import DebtArchive
from debt_ledger.services.debts import DebtLedger
from debt_ledger.services.payments import PaymentProcessor
from debt_ledger.utils.money import to_cents

router = APIRouter()


@router.post("/debts", response_model=DebtSchema, status_code=201)
def create_debt(
    request_body: CreateDebtRequest,
    request: Request,
    db: Session = Depends(get_db),
    photo_store: PhotoStore = Depends(get_photo_store),
):
    """
    Record a new debt against an existing or a new client.

    New clients need `fullname`, `phone` and `photo_data`.
    """
    request_id = get_request_id(request)

    try:
        debt = DebtLedger(db, photo_store).create_debt(
            client_ref=request_body.client_ref(),
            amount_cents=to_cents(request_body.amount),
            comment=request_body.comment,
            photo=request_body.photo_data,
        )
        response = DebtSchema.from_model(debt, include_client=True)

    except DomainException as e:
        logging.warning(f"Debt not created: {e}", extra={"request_id": request_id})
        raise to_http_exception(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    log_debt_event(request_id, "created", debt.id, client_id=debt.client_id)
    return response


@router.get("/debts", response_model=DebtPage)
def list_debts(
    request: Request,
    status: Optional[DebtStatus] = Query(None, description="active | paid | deleted"),
    search: Optional[str] = Query(None, description="Substring of the client's full name"),
    day: Optional[date] = Query(None, alias="date", description="Calendar day (UTC), YYYY-MM-DD"),
    sort_by: Optional[SortKey] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    """
    Page through debts.

    Returns:
        {data: [...], total: N}; deleted debts only appear with status=deleted
    """
    try:
        items, total = DebtLedger(db).list_debts(
            status=status,
            search=search,
            day=day,
            sort_by=sort_by,
            page=page,
            limit=limit,
        )
        return DebtPage(
            data=[DebtSchema.from_model(d, include_client=True) for d in items],
            total=total,
        )

    except DomainException as e:
        raise to_http_exception(e)

    except Exception as e:
        raise internal_error(db, request, e)


@router.get("/debts/{debt_id}", response_model=DebtSchema)
def get_debt(debt_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        debt = DebtLedger(db).get_debt(debt_id)
        return DebtSchema.from_model(debt, include_client=True)

    except DomainException as e:
        raise to_http_exception(e)

    except Exception as e:
        raise internal_error(db, request, e, debt_id=debt_id)


@router.post("/debts/{debt_id}/payments", response_model=PaymentResponse)
def record_payment(
    debt_id: int,
    request_body: RecordPaymentRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Apply a partial or full payment.

    The payment that brings the balance to zero must carry a rating; it
    closes the debt and sets the client's reputation.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        debt, payment = PaymentProcessor(db).record_payment(
            debt_id=debt_id,
            paid_cents=to_cents(request_body.paid_amount),
            comment=request_body.comment,
            rating=request_body.rating,
            request_id=request_id,
        )
        response = PaymentResponse(
            debt=DebtSchema.from_model(debt),
            payment=PaymentSchema.from_model(payment),
        )

    except DomainException as e:
        raise to_http_exception(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "debt_id": debt_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    log_payment(
        request_id,
        debt_id,
        payment.paid_cents,
        payment.remaining_cents,
        debt.status,
        duration_ms,
    )
    return response


@router.get("/debts/{debt_id}/payments", response_model=List[PaymentSchema])
def list_payments(debt_id: int, request: Request, db: Session = Depends(get_db)):
    """Payment history of a debt, oldest first"""
    try:
        payments = DebtLedger(db).list_payments(debt_id)
        return [PaymentSchema.from_model(p) for p in payments]

    except DomainException as e:
        raise to_http_exception(e)

    except Exception as e:
        raise internal_error(db, request, e, debt_id=debt_id)


@router.post("/debts/{debt_id}/delete", response_model=DebtSchema)
def delete_debt(
    debt_id: int,
    request_body: DeleteDebtRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Soft-delete an active debt; the reason is kept with the record"""
    request_id = get_request_id(request)

    try:
        debt = DebtArchive(db).delete_debt(debt_id, request_body.comment, request_id=request_id)
        response = DebtSchema.from_model(debt)

    except DomainException as e:
        raise to_http_exception(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "debt_id": debt_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    log_debt_event(request_id, "deleted", debt_id, reason=request_body.comment)
    return response
