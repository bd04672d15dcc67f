"""Payables, receivables and their installment settlement"""

import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from miles_ledger.api.dependencies import get_request_id, get_today, parse_id, to_http_error
from miles_ledger.api.v1.schemas import (
    ExpenseRequest,
    FinanceSummaryResponse,
    InstallmentListItem,
    InstallmentListResponse,
    InstallmentSchema,
    ScheduleResponse,
    ScheduleTotals,
    SettleRequest,
)
from miles_ledger.api.v1.scheduling import (
    PAYABLE,
    RECEIVABLE,
    load_card_cycle,
    report_schedule,
    schedule_response,
    stored_installments,
)
from miles_ledger.domain.exceptions import DomainException
from miles_ledger.domain.installments import build_schedule, plan_purchase
from miles_ledger.domain.models import InstallmentStatus
from miles_ledger.domain.money import to_cents
from miles_ledger.infrastructure.database.repositories import (
    CatalogRepository,
    PayableRepository,
    ReceivableRepository,
)
from miles_ledger.infrastructure.database.session import get_db
from miles_ledger.infrastructure.observability.logging import log_installment_settled
from miles_ledger.infrastructure.observability.metrics import settlement_counter
from miles_ledger.utils.date_utils import month_end, month_start
from miles_ledger.utils.formatting import format_cents

router = APIRouter()


@router.post("/payables", response_model=ScheduleResponse, status_code=201)
def create_expense(
    body: ExpenseRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Register an expense not tied to a miles purchase (subscriptions, fees).

    Card expenses are anchored on the card's first due date; otherwise on
    first_due_date or the purchase date.
    """
    request_id = get_request_id(request)

    try:
        total_cents = to_cents(body.total_amount)
        cycle = load_card_cycle(CatalogRepository(db), body.credit_card_id)
        plan = plan_purchase(
            total_cents,
            body.installment_count,
            body.purchase_date,
            cycle=cycle,
            first_due_date=body.first_due_date,
        )
        installments = list(build_schedule(plan))
        payable = PayableRepository(db).create_payable(
            description=body.description,
            total_cents=total_cents,
            installments=installments,
            credit_card_id=body.credit_card_id,
        )
        db.commit()

    except DomainException as e:
        db.rollback()
        logging.warning(f"Rejected expense: {e}", extra={"request_id": request_id})
        raise to_http_error(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    report_schedule(request_id, PAYABLE, payable, installments)
    return schedule_response(payable, PAYABLE, today)


def _get_schedule(repo, raw_id: str, label: str):
    header = repo.get_by_id(parse_id(raw_id, label))
    if not header:
        raise HTTPException(status_code=404, detail=f"{label.capitalize()} not found")
    return header


@router.get("/payables/{payable_id}", response_model=ScheduleResponse)
def get_payable(payable_id: str, db: Session = Depends(get_db), today: date = Depends(get_today)):
    """Payable with installments; pending rows past due are reported overdue"""
    payable = _get_schedule(PayableRepository(db), payable_id, "payable")
    return schedule_response(payable, PAYABLE, today)


@router.get("/receivables/{receivable_id}", response_model=ScheduleResponse)
def get_receivable(receivable_id: str, db: Session = Depends(get_db), today: date = Depends(get_today)):
    """Receivable with installments"""
    receivable = _get_schedule(ReceivableRepository(db), receivable_id, "receivable")
    return schedule_response(receivable, RECEIVABLE, today)


def _list_installments(repo, kind: str, status: Optional[InstallmentStatus], today: date) -> InstallmentListResponse:
    """Installments of every schedule of one kind, filtered by effective status"""
    items = []
    for row, header in repo.list_installments():
        rendered = stored_installments([row], today)[0]
        if status is not None and rendered.status is not status:
            continue
        items.append(
            InstallmentListItem(
                **rendered.model_dump(),
                schedule_id=str(header.id),
                description=header.description,
                installment_count=header.installment_count,
            )
        )

    total_cents = sum(item.amount_cents for item in items)
    return InstallmentListResponse(
        kind=kind,
        total_cents=total_cents,
        total_display=format_cents(total_cents),
        installments=items,
    )


@router.get("/payables", response_model=InstallmentListResponse)
def list_payables(
    status: Optional[InstallmentStatus] = Query(None, description="pending, overdue or paid"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Payable installments by due date; overdue is derived from the reference date"""
    return _list_installments(PayableRepository(db), PAYABLE, status, today)


@router.get("/receivables", response_model=InstallmentListResponse)
def list_receivables(
    status: Optional[InstallmentStatus] = Query(None, description="pending, overdue or received"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Receivable installments by due date"""
    return _list_installments(ReceivableRepository(db), RECEIVABLE, status, today)


def _settle(
    repo,
    kind: str,
    raw_id: str,
    sequence_number: int,
    body: Optional[SettleRequest],
    request: Request,
    db: Session,
    today: date,
):
    request_id = get_request_id(request)
    header_id = parse_id(raw_id, kind)
    settled_on = (body and body.settled_date) or today

    try:
        installment = repo.settle_installment(header_id, sequence_number, settled_on)
        db.commit()

    except DomainException as e:
        db.rollback()
        logging.warning(f"Rejected settlement: {e}", extra={"request_id": request_id})
        raise to_http_error(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    settlement_counter.labels(kind=kind).inc()
    log_installment_settled(request_id, kind, str(header_id), sequence_number, settled_on.isoformat())
    return stored_installments([installment], today)[0]


@router.post("/payables/{payable_id}/installments/{sequence_number}/settle", response_model=InstallmentSchema)
def settle_payable_installment(
    payable_id: str,
    sequence_number: int,
    request: Request,
    body: Optional[SettleRequest] = None,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Mark an installment as paid"""
    return _settle(PayableRepository(db), PAYABLE, payable_id, sequence_number, body, request, db, today)


@router.post("/receivables/{receivable_id}/installments/{sequence_number}/settle", response_model=InstallmentSchema)
def settle_receivable_installment(
    receivable_id: str,
    sequence_number: int,
    request: Request,
    body: Optional[SettleRequest] = None,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Mark an installment as received"""
    return _settle(ReceivableRepository(db), RECEIVABLE, receivable_id, sequence_number, body, request, db, today)


@router.get("/finance/summary", response_model=FinanceSummaryResponse)
def get_finance_summary(db: Session = Depends(get_db), today: date = Depends(get_today)):
    """Pending, overdue and settled totals for both sides of the ledger"""
    first_day = month_start(today)
    last_day = month_end(today)

    return FinanceSummaryResponse(
        as_of=today,
        payables=ScheduleTotals(**PayableRepository(db).summarize(today, first_day, last_day)),
        receivables=ScheduleTotals(**ReceivableRepository(db).summarize(today, first_day, last_day)),
    )
