"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Annotated, Any, List, Optional
from pydantic import BaseModel, BeforeValidator, Field

from miles_ledger.domain.exceptions import InvalidMonetaryValue
from miles_ledger.domain.models import InstallmentStatus, QuotaLevel, TransactionType
from miles_ledger.domain.money import parse_amount


def _parse_money(value: Any) -> Decimal:
    try:
        return parse_amount(value)
    except InvalidMonetaryValue as e:
        raise ValueError(str(e)) from e


# Accepts "R$ 1.200,00", "1200.00", 1200 or 1200.0
MoneyInput = Annotated[Decimal, BeforeValidator(_parse_money)]


class CardCreate(BaseModel):
    """Request body for POST /v1/cards"""

    name: str = Field(..., min_length=1)
    closing_day: int = Field(..., description="Statement closing day (1-31)")
    due_day: int = Field(..., description="Statement due day (1-31)")


class CardResponse(BaseModel):
    card_id: str
    name: str
    closing_day: int
    due_day: int


class ProgramCreate(BaseModel):
    """Request body for POST /v1/programs"""

    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, max_length=64)
    cpf_limit: Optional[int] = Field(None, gt=0, description="Distinct passengers per account per year")


class ProgramResponse(BaseModel):
    program_id: str
    name: str
    slug: str
    cpf_limit: int


class AccountCreate(BaseModel):
    """Request body for POST /v1/accounts"""

    name: str = Field(..., min_length=1)
    cpf: Optional[str] = Field(None, max_length=14)


class AccountResponse(BaseModel):
    account_id: str
    name: str
    cpf: Optional[str] = None


class PartyCreate(BaseModel):
    """Request body for POST /v1/clients and /v1/suppliers"""

    name: str = Field(..., min_length=1)
    cpf: Optional[str] = Field(None, max_length=14)
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class PartyResponse(BaseModel):
    id: str
    name: str
    cpf: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class InstallmentSchema(BaseModel):
    """Single installment in a schedule"""

    sequence_number: int
    due_date: date
    amount_cents: int
    amount_display: str
    status: InstallmentStatus = InstallmentStatus.PENDING
    settled_date: Optional[date] = None


class TransactionRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    account_id: uuid.UUID
    program_id: uuid.UUID
    type: TransactionType
    quantity: int = Field(..., gt=0, description="Miles moved; sign is derived from the type")
    transaction_date: date
    total_amount: Optional[MoneyInput] = Field(None, description="Total value of the transaction")
    price_per_thousand: Optional[MoneyInput] = Field(None, description="Used when total_amount is omitted")
    expiration_date: Optional[date] = None
    client_id: Optional[uuid.UUID] = Field(None, description="Client the miles are sold to")
    supplier_id: Optional[uuid.UUID] = Field(None, description="Supplier the miles are bought from")
    notes: Optional[str] = None

    # Purchase financing
    credit_card_id: Optional[uuid.UUID] = None
    installment_count: int = 1
    first_due_date: Optional[date] = None

    # Sale receivable
    receive_in_installments: bool = False
    first_receive_date: Optional[date] = None


class TransactionResponse(BaseModel):
    """Response for POST /v1/transactions"""

    transaction_id: str
    type: TransactionType
    quantity: int
    total_cents: int
    payable_id: Optional[str] = None
    receivable_id: Optional[str] = None
    installments: List[InstallmentSchema] = []


class TransactionListItem(BaseModel):
    """Single row of GET /v1/transactions"""

    transaction_id: str
    account_id: str
    program_id: str
    type: TransactionType
    quantity: int
    quantity_display: str
    total_cost_cents: Optional[int] = None
    sale_price_cents: Optional[int] = None
    transaction_date: date
    expiration_date: Optional[date] = None
    client_id: Optional[str] = None
    supplier_id: Optional[str] = None
    notes: Optional[str] = None


class TransactionListResponse(BaseModel):
    """Response for GET /v1/transactions"""

    transactions: List[TransactionListItem]


class InstallmentListItem(InstallmentSchema):
    """Installment together with the payable or receivable it belongs to"""

    schedule_id: str
    description: str
    installment_count: int


class InstallmentListResponse(BaseModel):
    """Response for GET /v1/payables and /v1/receivables"""

    kind: str
    total_cents: int
    total_display: str
    installments: List[InstallmentListItem]


class TransferRequest(BaseModel):
    """Request body for POST /v1/transfers"""

    account_id: uuid.UUID
    source_program_id: uuid.UUID
    destination_program_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    bonus_percent: Decimal = Field(Decimal("0"), ge=0)
    transaction_date: date


class TransferResponse(BaseModel):
    transfer_out_id: str
    transfer_in_id: str
    quantity_out: int
    quantity_in: int
    inherited_cost_cents: int
    destination_cost_per_thousand: Decimal
    destination_cost_per_thousand_display: str


class ExpenseRequest(BaseModel):
    """Request body for POST /v1/payables"""

    description: str = Field(..., min_length=1)
    total_amount: MoneyInput
    installment_count: int = 1
    purchase_date: date
    credit_card_id: Optional[uuid.UUID] = None
    first_due_date: Optional[date] = None


class SettleRequest(BaseModel):
    """Request body for installment settlement"""

    settled_date: Optional[date] = None


class ScheduleResponse(BaseModel):
    """Response for payable/receivable lookups"""

    id: str
    kind: str
    description: str
    total_cents: int
    total_display: str
    installment_count: int
    transaction_id: Optional[str] = None
    credit_card_id: Optional[str] = None
    installments: List[InstallmentSchema]
    created_at: str


class ScheduleTotals(BaseModel):
    pending_cents: int
    overdue_cents: int
    settled_cents: int
    open_this_month_cents: int


class FinanceSummaryResponse(BaseModel):
    """Response for GET /v1/finance/summary"""

    as_of: date
    payables: ScheduleTotals
    receivables: ScheduleTotals


class PositionSchema(BaseModel):
    account_id: str
    program_id: str
    balance_quantity: int
    balance_display: str
    total_invested_cents: int
    average_cost_per_thousand: Decimal
    average_cost_display: str


class PositionsResponse(BaseModel):
    """Response for GET /v1/positions"""

    positions: List[PositionSchema]


class PurchaseQuoteRequest(BaseModel):
    """Request body for POST /v1/quotes/purchase"""

    quantity: int = Field(..., ge=0)
    total_amount: MoneyInput
    installment_count: int = 1
    transaction_date: date
    credit_card_id: Optional[uuid.UUID] = None
    first_due_date: Optional[date] = None


class PurchaseQuoteResponse(BaseModel):
    total_cents: int
    cost_per_thousand: Decimal
    cost_per_thousand_display: str
    installments: List[InstallmentSchema]


class CpfQuotaSchema(BaseModel):
    account_id: str
    program_id: str
    used: int
    limit: int
    available: int
    percent: Decimal
    level: QuotaLevel
    consumes_slot: Optional[bool] = None


class SaleQuoteRequest(BaseModel):
    """Request body for POST /v1/quotes/sale"""

    account_id: uuid.UUID
    program_id: uuid.UUID
    quantity: int = Field(..., ge=0)
    total_amount: MoneyInput
    client_id: Optional[uuid.UUID] = None


class SaleQuoteResponse(BaseModel):
    average_cost_per_thousand: Decimal
    cost_of_goods: Decimal
    profit: Decimal
    profit_display: str
    profit_per_thousand: Decimal
    margin_percent: Decimal
    quota: CpfQuotaSchema


class TransferQuoteRequest(BaseModel):
    """Request body for POST /v1/quotes/transfer"""

    account_id: uuid.UUID
    source_program_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    bonus_percent: Decimal = Field(Decimal("0"), ge=0)


class TransferQuoteResponse(BaseModel):
    quantity_out: int
    quantity_in: int
    source_cost_per_thousand: Decimal
    inherited_cost_cents: int
    inherited_cost_display: str
    destination_cost_per_thousand: Decimal
    destination_cost_per_thousand_display: str


class CpfQuotaResponse(BaseModel):
    """Response for GET /v1/quotas/cpf"""

    window_start: date
    quotas: List[CpfQuotaSchema]
