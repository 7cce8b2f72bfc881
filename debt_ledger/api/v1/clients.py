"""/v1/clients - client search, listing and detail"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from debt_ledger.api.errors import internal_error, to_http_exception
from debt_ledger.api.v1.schemas import ClientCandidateSchema, ClientPage, ClientSchema, DebtSchema
from debt_ledger.config import settings
from debt_ledger.domain.exceptions import DomainException
from debt_ledger.domain.models import DebtStatus
from debt_ledger.infrastructure.database.session import get_db
from debt_ledger.services.clients import ClientDirectory
from debt_ledger.services.debts import DebtLedger

router = APIRouter()


@router.get("/clients/search", response_model=List[ClientCandidateSchema])
def search_clients(
    request: Request,
    q: str = Query(..., min_length=1, description="Fragment of the client's full name"),
    db: Session = Depends(get_db),
):
    """
    Name search used when recording a new debt.

    Returns:
        Matching clients with `has_active_debt` and current `reputation`
    """
    try:
        candidates = ClientDirectory(db).search_clients(q)
        return [ClientCandidateSchema.from_candidate(c) for c in candidates]
    except DomainException as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error(db, request, e)


@router.get("/clients", response_model=ClientPage)
def list_clients(
    request: Request,
    search: Optional[str] = Query(None, description="Substring of name, phone or address"),
    day: Optional[date] = Query(None, alias="date", description="Creation day (UTC), YYYY-MM-DD"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    try:
        items, total = ClientDirectory(db).list_clients(search=search, day=day, page=page, limit=limit)
        return ClientPage(data=[ClientSchema.from_model(c) for c in items], total=total)
    except DomainException as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error(db, request, e)


@router.get("/clients/{client_id}", response_model=ClientSchema)
def get_client(client_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        return ClientSchema.from_model(ClientDirectory(db).get_client(client_id))
    except DomainException as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error(db, request, e, client_id=client_id)


@router.get("/clients/{client_id}/debts", response_model=List[DebtSchema])
def get_client_debts(
    client_id: int,
    request: Request,
    status: Optional[DebtStatus] = Query(None),
    db: Session = Depends(get_db),
):
    """Debts of one client for the detail view, newest first"""
    try:
        debts = DebtLedger(db).get_debts_for_client(client_id, status)
        return [DebtSchema.from_model(d) for d in debts]
    except DomainException as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error(db, request, e, client_id=client_id)
