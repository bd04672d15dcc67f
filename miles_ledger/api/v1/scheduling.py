"""Helpers shared by the endpoints that create or render installment schedules"""

import uuid
from datetime import date
from typing import Iterable, List, Optional

from miles_ledger.api.v1.schemas import InstallmentSchema, ScheduleResponse
from miles_ledger.domain.installments import effective_status
from miles_ledger.domain.models import CardCycle, Installment
from miles_ledger.infrastructure.database.repositories import CatalogRepository
from miles_ledger.infrastructure.observability.logging import log_schedule_created
from miles_ledger.infrastructure.observability.metrics import record_schedule
from miles_ledger.utils.formatting import format_cents

PAYABLE = "payable"
RECEIVABLE = "receivable"


def load_card_cycle(catalog: CatalogRepository, credit_card_id: Optional[uuid.UUID]) -> Optional[CardCycle]:
    """Billing rule of the card financing a purchase, if any"""
    if credit_card_id is None:
        return None
    card = catalog.get_card(credit_card_id)
    return CardCycle(closing_day=card.closing_day, due_day=card.due_day)


def preview_installments(installments: Iterable[Installment]) -> List[InstallmentSchema]:
    """Render a freshly generated schedule"""
    return [
        InstallmentSchema(
            sequence_number=inst.sequence_number,
            due_date=inst.due_date,
            amount_cents=inst.amount_cents,
            amount_display=format_cents(inst.amount_cents),
        )
        for inst in installments
    ]


def stored_installments(rows, today: date) -> List[InstallmentSchema]:
    """Render persisted installment rows with their effective status"""
    return [
        InstallmentSchema(
            sequence_number=row.sequence_number,
            due_date=row.due_date,
            amount_cents=row.amount_cents,
            amount_display=format_cents(row.amount_cents),
            status=effective_status(row.status, row.due_date, today),
            settled_date=row.settled_date,
        )
        for row in rows
    ]


def schedule_response(header, kind: str, today: date) -> ScheduleResponse:
    credit_card_id = getattr(header, "credit_card_id", None)
    return ScheduleResponse(
        id=str(header.id),
        kind=kind,
        description=header.description,
        total_cents=header.total_cents,
        total_display=format_cents(header.total_cents),
        installment_count=header.installment_count,
        transaction_id=str(header.transaction_id) if header.transaction_id else None,
        credit_card_id=str(credit_card_id) if credit_card_id else None,
        installments=stored_installments(header.installments, today),
        created_at=header.created_at.isoformat(),
    )


def report_schedule(request_id: str, kind: str, header, installments: List[Installment]) -> None:
    """Record metrics and logs for a committed schedule"""
    record_schedule(kind, len(installments))
    credit_card_id = getattr(header, "credit_card_id", None)
    log_schedule_created(
        request_id=request_id,
        kind=kind,
        parent_id=str(header.id),
        total_cents=header.total_cents,
        installment_count=len(installments),
        first_due_date=installments[0].due_date.isoformat(),
        credit_card_id=str(credit_card_id) if credit_card_id else None,
    )
