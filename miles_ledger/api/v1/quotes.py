"""POST /v1/quotes/* - previews that compute without writing"""

from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from miles_ledger.api.dependencies import get_today, to_http_error
from miles_ledger.api.v1.positions import load_cpf_quota, quota_schema
from miles_ledger.api.v1.schemas import (
    PurchaseQuoteRequest,
    PurchaseQuoteResponse,
    SaleQuoteRequest,
    SaleQuoteResponse,
    TransferQuoteRequest,
    TransferQuoteResponse,
)
from miles_ledger.api.v1.scheduling import load_card_cycle, preview_installments
from miles_ledger.domain.exceptions import DomainException
from miles_ledger.domain.installments import build_schedule, plan_purchase
from miles_ledger.domain.miles_cost import cost_per_thousand, quote_transfer, sale_profit
from miles_ledger.domain.money import round_rate, to_cents
from miles_ledger.infrastructure.database.repositories import CatalogRepository, TransactionRepository
from miles_ledger.infrastructure.database.session import get_db
from miles_ledger.utils.formatting import format_cents, format_cost_per_thousand, format_currency

router = APIRouter()


@router.post("/quotes/purchase", response_model=PurchaseQuoteResponse)
def quote_purchase(body: PurchaseQuoteRequest, db: Session = Depends(get_db)):
    """CPM of a purchase and the installment schedule it would create"""
    try:
        total_cents = to_cents(body.total_amount)
        cycle = load_card_cycle(CatalogRepository(db), body.credit_card_id)
        plan = plan_purchase(
            total_cents,
            body.installment_count,
            body.transaction_date,
            cycle=cycle,
            first_due_date=body.first_due_date,
        )
        installments = build_schedule(plan)
    except DomainException as e:
        raise to_http_error(e)

    cpm = cost_per_thousand(total_cents, body.quantity)
    return PurchaseQuoteResponse(
        total_cents=total_cents,
        cost_per_thousand=round_rate(cpm),
        cost_per_thousand_display=format_cost_per_thousand(cpm),
        installments=preview_installments(installments),
    )


@router.post("/quotes/sale", response_model=SaleQuoteResponse)
def quote_sale(body: SaleQuoteRequest, db: Session = Depends(get_db), today: date = Depends(get_today)):
    """Profit and margin of a sale at the position's average CPM, plus the CPF quota check"""
    try:
        position = TransactionRepository(db).get_position(body.account_id, body.program_id)
        quota = load_cpf_quota(db, body.account_id, body.program_id, today, candidate_client_id=body.client_id)
    except DomainException as e:
        raise to_http_error(e)

    result = sale_profit(to_cents(body.total_amount), body.quantity, position.average_cost_per_thousand)
    return SaleQuoteResponse(
        average_cost_per_thousand=round_rate(position.average_cost_per_thousand),
        cost_of_goods=round_rate(result.cost_of_goods),
        profit=round_rate(result.profit),
        profit_display=format_currency(result.profit),
        profit_per_thousand=round_rate(result.profit_per_thousand),
        margin_percent=round_rate(result.margin_percent),
        quota=quota_schema(body.account_id, body.program_id, quota),
    )


@router.post("/quotes/transfer", response_model=TransferQuoteResponse)
def quote_transfer_preview(body: TransferQuoteRequest, db: Session = Depends(get_db)):
    """Destination quantity and CPM of a transfer before recording it"""
    position = TransactionRepository(db).get_position(body.account_id, body.source_program_id)
    try:
        quote = quote_transfer(body.quantity, body.bonus_percent, position.average_cost_per_thousand)
    except DomainException as e:
        raise to_http_error(e)

    return TransferQuoteResponse(
        quantity_out=quote.quantity_out,
        quantity_in=quote.quantity_in,
        source_cost_per_thousand=round_rate(position.average_cost_per_thousand),
        inherited_cost_cents=quote.inherited_cost_cents,
        inherited_cost_display=format_cents(quote.inherited_cost_cents),
        destination_cost_per_thousand=round_rate(quote.destination_cost_per_thousand),
        destination_cost_per_thousand_display=format_cost_per_thousand(quote.destination_cost_per_thousand),
    )
