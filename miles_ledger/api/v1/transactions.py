"""/v1/transactions and /v1/transfers - record and list inventory movements"""

import time
import uuid
import logging
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from miles_ledger.api.dependencies import get_request_id, to_http_error
from miles_ledger.api.v1.schemas import (
    TransactionListItem,
    TransactionListResponse,
    TransactionRequest,
    TransactionResponse,
    TransferRequest,
    TransferResponse,
)
from miles_ledger.api.v1.scheduling import (
    PAYABLE,
    RECEIVABLE,
    load_card_cycle,
    preview_installments,
    report_schedule,
)
from miles_ledger.domain.exceptions import (
    DomainException,
    InsufficientBalanceError,
    InvalidAmount,
    InvalidTransferError,
)
from miles_ledger.domain.installments import build_schedule, plan_purchase
from miles_ledger.domain.miles_cost import UNITS_PER_THOUSAND, quote_transfer
from miles_ledger.domain.models import InstallmentPlan, TransactionType
from miles_ledger.domain.money import round_rate, to_cents
from miles_ledger.infrastructure.database.repositories import (
    CatalogRepository,
    PayableRepository,
    ReceivableRepository,
    TransactionRepository,
)
from miles_ledger.infrastructure.database.session import get_db
from miles_ledger.infrastructure.observability.logging import log_transaction_recorded
from miles_ledger.infrastructure.observability.metrics import record_transaction
from miles_ledger.utils.formatting import format_cost_per_thousand, format_quantity

router = APIRouter()


def transaction_total_cents(body: TransactionRequest) -> int:
    """Explicit total wins; otherwise quantity priced per thousand"""
    if body.total_amount is not None:
        total_cents = to_cents(body.total_amount)
    elif body.price_per_thousand is not None:
        total_cents = to_cents(Decimal(body.quantity) / UNITS_PER_THOUSAND * body.price_per_thousand)
    else:
        total_cents = 0

    if total_cents < 0:
        raise InvalidAmount(f"Transaction total must not be negative, got {total_cents} cents")
    return total_cents


def ensure_balance(transactions: TransactionRepository, account_id, program_id, quantity: int) -> None:
    """Outflows may not take a position below zero"""
    position = transactions.get_position(account_id, program_id)
    if position.balance_quantity < quantity:
        raise InsufficientBalanceError(
            f"Balance of {position.balance_quantity} miles cannot cover an outflow of {quantity}"
        )


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    body: TransactionRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Record a miles transaction.

    Flow:
    1. Resolve account, program and the client or supplier, if given
    2. Compute the monetary total (explicit or quantity x price per thousand)
    3. Persist the transaction with signed quantity
    4. Purchase: build the payable schedule (card cycle, manual date or transaction date)
    5. Sale received in installments: build the receivable schedule
    6. Commit everything at once
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Resolve references
        catalog = CatalogRepository(db)
        account = catalog.get_account(body.account_id)
        program = catalog.get_program(body.program_id)
        client = catalog.get_client(body.client_id) if body.client_id else None
        if body.supplier_id:
            catalog.get_supplier(body.supplier_id)
        transactions = TransactionRepository(db)

        # 2. Total value
        total_cents = transaction_total_cents(body)

        if body.type.is_outflow:
            ensure_balance(transactions, body.account_id, body.program_id, body.quantity)

        # 3. Persist transaction
        db_transaction = transactions.create_transaction(
            account_id=body.account_id,
            program_id=body.program_id,
            transaction_type=body.type,
            quantity=body.quantity,
            transaction_date=body.transaction_date,
            total_cost_cents=total_cents,
            sale_price_cents=total_cents,
            expiration_date=body.expiration_date,
            client_id=body.client_id,
            supplier_id=body.supplier_id,
            notes=body.notes,
        )

        # 4/5. Installment schedules
        kind = None
        header = None
        installments = []
        if body.type is TransactionType.PURCHASE and total_cents > 0:
            cycle = load_card_cycle(catalog, body.credit_card_id)
            plan = plan_purchase(
                total_cents,
                body.installment_count,
                body.transaction_date,
                cycle=cycle,
                first_due_date=body.first_due_date,
            )
            installments = list(build_schedule(plan))
            kind = PAYABLE
            header = PayableRepository(db).create_payable(
                description=f"Miles purchase - {program.name} - {account.name}",
                total_cents=total_cents,
                installments=installments,
                transaction_id=db_transaction.id,
                credit_card_id=body.credit_card_id,
            )

        elif body.type is TransactionType.SALE and body.receive_in_installments and total_cents > 0:
            plan = InstallmentPlan(
                total_cents=total_cents,
                count=body.installment_count,
                anchor_date=body.first_receive_date or body.transaction_date,
            )
            installments = list(build_schedule(plan))
            kind = RECEIVABLE
            suffix = f" - {client.name}" if client is not None else ""
            header = ReceivableRepository(db).create_receivable(
                description=f"Miles sale - {program.name}{suffix}",
                total_cents=total_cents,
                installments=installments,
                transaction_id=db_transaction.id,
            )

        # 6. Commit
        db.commit()

    except DomainException as e:
        db.rollback()
        logging.warning(f"Rejected transaction: {e}", extra={"request_id": request_id})
        raise to_http_error(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    record_transaction(body.type.value, db_transaction.quantity)
    log_transaction_recorded(
        request_id, str(db_transaction.id), body.type.value, db_transaction.quantity, duration_ms
    )
    if header is not None:
        report_schedule(request_id, kind, header, installments)

    return TransactionResponse(
        transaction_id=str(db_transaction.id),
        type=body.type,
        quantity=db_transaction.quantity,
        total_cents=total_cents,
        payable_id=str(header.id) if kind == PAYABLE else None,
        receivable_id=str(header.id) if kind == RECEIVABLE else None,
        installments=preview_installments(installments),
    )


@router.post("/transfers", response_model=TransferResponse, status_code=201)
def create_transfer(
    body: TransferRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Move points between programs of the same account.

    Writes a transfer_out on the source and a transfer_in on the destination;
    the historical cost of the points travels with them and the bonus
    dilutes the destination CPM.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        if body.source_program_id == body.destination_program_id:
            raise InvalidTransferError("Source and destination programs must differ")

        catalog = CatalogRepository(db)
        catalog.get_account(body.account_id)
        source = catalog.get_program(body.source_program_id)
        destination = catalog.get_program(body.destination_program_id)
        transactions = TransactionRepository(db)

        ensure_balance(transactions, body.account_id, body.source_program_id, body.quantity)
        position = transactions.get_position(body.account_id, body.source_program_id)
        quote = quote_transfer(body.quantity, body.bonus_percent, position.average_cost_per_thousand)

        transfer_out = transactions.create_transaction(
            account_id=body.account_id,
            program_id=body.source_program_id,
            transaction_type=TransactionType.TRANSFER_OUT,
            quantity=quote.quantity_out,
            transaction_date=body.transaction_date,
            total_cost_cents=quote.inherited_cost_cents,
            notes=f"Transfer to {destination.name}",
        )
        transfer_in = transactions.create_transaction(
            account_id=body.account_id,
            program_id=body.destination_program_id,
            transaction_type=TransactionType.TRANSFER_IN,
            quantity=quote.quantity_in,
            transaction_date=body.transaction_date,
            total_cost_cents=quote.inherited_cost_cents,
            notes=f"Transfer from {source.name} with {quote.bonus_percent}% bonus",
        )

        db.commit()

    except DomainException as e:
        db.rollback()
        logging.warning(f"Rejected transfer: {e}", extra={"request_id": request_id})
        raise to_http_error(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    for db_transaction in (transfer_out, transfer_in):
        record_transaction(db_transaction.type, db_transaction.quantity)
        log_transaction_recorded(
            request_id, str(db_transaction.id), db_transaction.type, db_transaction.quantity, duration_ms
        )

    return TransferResponse(
        transfer_out_id=str(transfer_out.id),
        transfer_in_id=str(transfer_in.id),
        quantity_out=quote.quantity_out,
        quantity_in=quote.quantity_in,
        inherited_cost_cents=quote.inherited_cost_cents,
        destination_cost_per_thousand=round_rate(quote.destination_cost_per_thousand),
        destination_cost_per_thousand_display=format_cost_per_thousand(quote.destination_cost_per_thousand),
    )


def _transaction_item(row) -> TransactionListItem:
    return TransactionListItem(
        transaction_id=str(row.id),
        account_id=str(row.account_id),
        program_id=str(row.program_id),
        type=TransactionType(row.type),
        quantity=row.quantity,
        quantity_display=format_quantity(row.quantity),
        total_cost_cents=row.total_cost_cents,
        sale_price_cents=row.sale_price_cents,
        transaction_date=row.transaction_date,
        expiration_date=row.expiration_date,
        client_id=str(row.client_id) if row.client_id else None,
        supplier_id=str(row.supplier_id) if row.supplier_id else None,
        notes=row.notes,
    )


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    account_id: Optional[uuid.UUID] = Query(None, description="Filter by account"),
    program_id: Optional[uuid.UUID] = Query(None, description="Filter by program"),
    type: Optional[TransactionType] = Query(None, description="Filter by transaction type"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Purchases, sales and other movements, newest first"""
    rows = TransactionRepository(db).list_transactions(
        account_id=account_id,
        program_id=program_id,
        transaction_type=type,
        limit=limit,
        offset=offset,
    )
    return TransactionListResponse(transactions=[_transaction_item(row) for row in rows])
