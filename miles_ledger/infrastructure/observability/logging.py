"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger.json import JsonFormatter

from miles_ledger.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Quiet SQL echo unless explicitly debugging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def log_schedule_created(
    request_id: str,
    kind: str,
    parent_id: str,
    total_cents: int,
    installment_count: int,
    first_due_date: str,
    credit_card_id: Optional[str] = None,
) -> None:
    """Log a persisted installment schedule"""
    logging.info(
        "Installment schedule created",
        extra={
            "request_id": request_id,
            "step": "schedule_created",
            "kind": kind,
            "parent_id": parent_id,
            "total_cents": total_cents,
            "installment_count": installment_count,
            "first_due_date": first_due_date,
            "credit_card_id": credit_card_id,
        },
    )


def log_transaction_recorded(
    request_id: str,
    transaction_id: str,
    transaction_type: str,
    quantity: int,
    duration_ms: float,
) -> None:
    """Log a persisted miles transaction"""
    logging.info(
        "Transaction recorded",
        extra={
            "request_id": request_id,
            "step": "transaction_recorded",
            "transaction_id": transaction_id,
            "transaction_type": transaction_type,
            "quantity": quantity,
            "duration_ms": duration_ms,
        },
    )


def log_installment_settled(
    request_id: str,
    kind: str,
    parent_id: str,
    sequence_number: int,
    settled_date: str,
) -> None:
    """Log an installment marked as paid or received"""
    logging.info(
        "Installment settled",
        extra={
            "request_id": request_id,
            "step": "installment_settled",
            "kind": kind,
            "parent_id": parent_id,
            "sequence_number": sequence_number,
            "settled_date": settled_date,
        },
    )
