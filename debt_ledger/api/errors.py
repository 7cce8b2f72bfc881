"""Mapping of domain exceptions to HTTP responses"""

import logging

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from debt_ledger.api.dependencies import get_request_id
from debt_ledger.domain.exceptions import (
    ConcurrencyError,
    DomainException,
    InvalidStateError,
    MissingRatingError,
    NotFoundError,
    OverpaymentError,
    ValidationError,
)

STATUS_BY_EXCEPTION = {
    ValidationError: 422,
    OverpaymentError: 422,
    MissingRatingError: 422,
    NotFoundError: 404,
    InvalidStateError: 409,
    ConcurrencyError: 409,
}


def to_http_exception(exc: DomainException) -> HTTPException:
    """Structured, user-displayable error body: {"error": code, "message": text}"""
    status_code = 400
    for exc_type, code in STATUS_BY_EXCEPTION.items():
        if isinstance(exc, exc_type):
            status_code = code
            break

    headers = {"Retry-After": "1"} if isinstance(exc, ConcurrencyError) else None
    return HTTPException(
        status_code=status_code,
        detail={"error": exc.code, "message": str(exc)},
        headers=headers,
    )


def internal_error(db: Session, request: Request, exc: Exception, **fields) -> HTTPException:
    """Roll back, log and hide an unexpected failure behind a plain 500"""
    db.rollback()
    logging.error(f"Unexpected error: {exc}", extra={"request_id": get_request_id(request), **fields})
    return HTTPException(status_code=500, detail="Internal server error")
