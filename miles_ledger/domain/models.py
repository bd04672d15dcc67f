"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from miles_ledger.domain.exceptions import InvalidCalendarDay


class TransactionType(str, Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    BONUS = "bonus"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    USE = "use"
    EXPIRE = "expire"

    @property
    def is_outflow(self) -> bool:
        return self in OUTFLOW_TYPES

    @property
    def carries_cost(self) -> bool:
        return self in COST_BEARING_TYPES


OUTFLOW_TYPES = frozenset(
    {TransactionType.SALE, TransactionType.TRANSFER_OUT, TransactionType.USE, TransactionType.EXPIRE}
)
# Transfers out carry the cost they move away, stored as a negative amount
COST_BEARING_TYPES = frozenset(
    {TransactionType.PURCHASE, TransactionType.TRANSFER_IN, TransactionType.BONUS, TransactionType.TRANSFER_OUT}
)


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    RECEIVED = "received"
    OVERDUE = "overdue"


class QuotaLevel(str, Enum):
    OK = "ok"
    WARNING = "warning"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class CardCycle:
    """Billing rule of one credit card"""

    closing_day: int
    due_day: int

    def __post_init__(self) -> None:
        for name in ("closing_day", "due_day"):
            value = getattr(self, name)
            if not 1 <= value <= 31:
                raise InvalidCalendarDay(f"{name} must be between 1 and 31, got {value}")


@dataclass(frozen=True)
class Installment:
    """Single payment in an installment schedule"""

    sequence_number: int
    amount_cents: int
    due_date: date


@dataclass(frozen=True)
class InstallmentPlan:
    """Transient description of a schedule to be generated"""

    total_cents: int
    count: int
    anchor_date: date


@dataclass(frozen=True)
class SaleProfit:
    """Profit figures for a sale priced against the average acquisition cost"""

    cost_of_goods: Decimal
    profit: Decimal
    profit_per_thousand: Decimal
    margin_percent: Decimal


@dataclass(frozen=True)
class TransferQuote:
    """Preview of an inter-program transfer"""

    quantity_out: int
    bonus_percent: Decimal
    quantity_in: int
    inherited_cost_cents: int
    destination_cost_per_thousand: Decimal


@dataclass
class MilesPosition:
    """Balance of one program inside one account"""

    account_id: str
    program_id: str
    balance_quantity: int
    acquired_quantity: int
    total_invested_cents: int
    average_cost_per_thousand: Decimal


@dataclass(frozen=True)
class CpfQuota:
    """Usage of the distinct-passenger allowance of an account in a program"""

    used: int
    limit: int
    available: int
    percent: Decimal
    level: QuotaLevel
    consumes_slot: Optional[bool] = None
