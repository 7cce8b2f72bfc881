"""Structured JSON logging for production observability"""

import logging
import sys
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from debt_ledger.config import settings
from debt_ledger.utils.date_utils import utc_now


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = utc_now().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    # Server logs go through the same JSON handler
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True


def log_payment(
    request_id: str,
    debt_id: int,
    paid_cents: int,
    remaining_cents: int,
    status: str,
    duration_ms: float,
) -> None:
    """Log structured payment outcome for reconciliation"""
    logging.info(
        "Payment completed",
        extra={
            "request_id": request_id,
            "debt_id": debt_id,
            "step": "payment_complete",
            "paid_cents": paid_cents,
            "remaining_cents": remaining_cents,
            "debt_status": status,
            "duration_ms": duration_ms,
        },
    )


def log_debt_event(request_id: str, step: str, debt_id: int, **fields: Any) -> None:
    """Log a debt lifecycle event (created, deleted) with request context"""
    logging.info(
        f"Debt {step}",
        extra={"request_id": request_id, "debt_id": debt_id, "step": step, **fields},
    )
