"""Cost-per-thousand, profit and margin arithmetic for miles inventory"""

from decimal import ROUND_FLOOR, Decimal
from typing import Union

from miles_ledger.domain.exceptions import InvalidTransferError
from miles_ledger.domain.models import MilesPosition, SaleProfit, TransferQuote
from miles_ledger.domain.money import CENTS_PER_UNIT, to_cents

UNITS_PER_THOUSAND = 1000
ZERO = Decimal("0")
HUNDRED = Decimal("100")

Rate = Union[Decimal, int, float, str]


def _decimal(value: Rate) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def cost_per_thousand(total_cost_cents: int, quantity: int) -> Decimal:
    """
    Cost of 1,000 miles in currency units (CPM).

    Returns 0 for zero quantity so half-filled forms still render.
    """
    if quantity == 0:
        return ZERO
    return Decimal(total_cost_cents) / CENTS_PER_UNIT / quantity * UNITS_PER_THOUSAND


def sale_profit(
    sale_value_cents: int,
    quantity_sold: int,
    average_cost_per_thousand: Rate,
) -> SaleProfit:
    """
    Profit of a sale against the average acquisition cost of the inventory.

    - cost of goods = quantity / 1000 * average CPM
    - profit per thousand is 0 when nothing was sold
    - margin is 100% when the miles cost nothing (bonus-only inventory)
    """
    average = _decimal(average_cost_per_thousand)
    sale_value = Decimal(sale_value_cents) / CENTS_PER_UNIT

    cost_of_goods = Decimal(quantity_sold) / UNITS_PER_THOUSAND * average
    profit = sale_value - cost_of_goods

    profit_per_thousand = (
        profit / quantity_sold * UNITS_PER_THOUSAND if quantity_sold > 0 else ZERO
    )
    margin_percent = profit / cost_of_goods * HUNDRED if cost_of_goods > 0 else HUNDRED

    return SaleProfit(
        cost_of_goods=cost_of_goods,
        profit=profit,
        profit_per_thousand=profit_per_thousand,
        margin_percent=margin_percent,
    )


def quote_transfer(
    quantity_out: int,
    bonus_percent: Rate,
    source_average_cost_per_thousand: Rate,
) -> TransferQuote:
    """
    Preview moving points from one program to another.

    The historical cost of the points leaving the source travels with them;
    the transfer bonus only adds quantity, so the destination CPM drops.

    Raises:
        InvalidTransferError: non-positive quantity or negative bonus
    """
    if quantity_out <= 0:
        raise InvalidTransferError(f"Transfer quantity must be positive, got {quantity_out}")
    bonus = _decimal(bonus_percent)
    if bonus < 0:
        raise InvalidTransferError(f"Transfer bonus must not be negative, got {bonus}")

    bonus_quantity = int((Decimal(quantity_out) * bonus / HUNDRED).to_integral_value(rounding=ROUND_FLOOR))
    quantity_in = quantity_out + bonus_quantity

    inherited = Decimal(quantity_out) / UNITS_PER_THOUSAND * _decimal(source_average_cost_per_thousand)
    inherited_cost_cents = to_cents(inherited)

    return TransferQuote(
        quantity_out=quantity_out,
        bonus_percent=bonus,
        quantity_in=quantity_in,
        inherited_cost_cents=inherited_cost_cents,
        destination_cost_per_thousand=cost_per_thousand(inherited_cost_cents, quantity_in),
    )


def summarize_position(
    account_id: str,
    program_id: str,
    balance_quantity: int,
    acquired_quantity: int,
    total_invested_cents: int,
) -> MilesPosition:
    """Build a position with its weighted-average acquisition cost"""
    return MilesPosition(
        account_id=account_id,
        program_id=program_id,
        balance_quantity=balance_quantity,
        acquired_quantity=acquired_quantity,
        total_invested_cents=total_invested_cents,
        average_cost_per_thousand=cost_per_thousand(total_invested_cents, acquired_quantity),
    )
