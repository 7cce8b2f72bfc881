"""Commit/rollback boundary shared by the ledger services"""

import logging
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from debt_ledger.domain.exceptions import ConcurrencyError
from debt_ledger.infrastructure.observability.metrics import concurrency_conflict_counter

# lock_not_available, serialization_failure, deadlock_detected
LOCK_CONFLICT_PGCODES = {"55P03", "40001", "40P01"}


def is_lock_conflict(exc: DBAPIError) -> bool:
    """True for errors that mean "someone else holds this row", not a broken database"""
    if getattr(exc.orig, "pgcode", None) in LOCK_CONFLICT_PGCODES:
        return True
    return "database is locked" in str(exc.orig)


@contextmanager
def atomic(db: Session, debt_id: int | None = None) -> Iterator[None]:
    """
    Run the block as one transaction.

    Commits on success. On any error the session is rolled back, so nothing
    written inside the block survives. Lost races on a debt row surface as
    ConcurrencyError, which callers may retry.
    """
    try:
        yield
        db.commit()
    except StaleDataError as e:
        db.rollback()
        concurrency_conflict_counter.inc()
        logging.warning("Stale debt version", extra={"debt_id": debt_id, "step": "concurrency_conflict"})
        raise ConcurrencyError(f"Debt {debt_id} was modified concurrently, retry the operation") from e
    except OperationalError as e:
        db.rollback()
        if not is_lock_conflict(e):
            raise
        concurrency_conflict_counter.inc()
        logging.warning("Debt row locked", extra={"debt_id": debt_id, "step": "concurrency_conflict"})
        raise ConcurrencyError(f"Debt {debt_id} is locked by another operation, retry the operation") from e
    except Exception:
        db.rollback()
        raise
