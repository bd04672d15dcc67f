"""Unit tests for CPM, profit, transfer and position arithmetic"""

import pytest
from decimal import Decimal
from miles_ledger.domain.exceptions import InvalidTransferError
from miles_ledger.domain.miles_cost import cost_per_thousand, quote_transfer, sale_profit, summarize_position


def test_cost_per_thousand():
    # R$ 1050.00 for 50,000 miles
    assert cost_per_thousand(105000, 50000) == Decimal("21")


def test_cost_per_thousand_zero_quantity():
    assert cost_per_thousand(105000, 0) == 0
    assert cost_per_thousand(0, 0) == 0


def test_sale_profit():
    """20,000 miles sold for R$ 600.00 with average CPM of R$ 21.00"""
    result = sale_profit(60000, 20000, Decimal("21"))

    assert result.cost_of_goods == Decimal("420")
    assert result.profit == Decimal("180")
    assert result.profit_per_thousand == Decimal("9")
    assert result.margin_percent.quantize(Decimal("0.01")) == Decimal("42.86")


def test_sale_profit_at_a_loss():
    result = sale_profit(30000, 20000, "21")

    assert result.profit == Decimal("-120")
    assert result.margin_percent.quantize(Decimal("0.01")) == Decimal("-28.57")


def test_sale_profit_zero_quantity():
    result = sale_profit(10000, 0, Decimal("21"))

    assert result.profit_per_thousand == 0
    assert result.profit == Decimal("100")


def test_sale_profit_zero_cost_is_full_margin():
    """Inventory that cost nothing sells at a 100% margin by convention"""
    result = sale_profit(100, 1000, 0)

    assert result.margin_percent == 100


def test_quote_transfer_with_bonus():
    """10,000 points at CPM 30 with 100% bonus -> 20,000 points at CPM 15"""
    quote = quote_transfer(10000, 100, Decimal("30"))

    assert quote.quantity_in == 20000
    assert quote.inherited_cost_cents == 30000
    assert quote.destination_cost_per_thousand == Decimal("15")


def test_quote_transfer_bonus_rounds_down():
    quote = quote_transfer(999, Decimal("33.3"), Decimal("10"))

    # 999 * 33.3% = 332.667 -> 332
    assert quote.quantity_in == 1331
    assert quote.inherited_cost_cents == 999


def test_quote_transfer_without_cost_basis():
    quote = quote_transfer(5000, 0, 0)

    assert quote.quantity_in == 5000
    assert quote.inherited_cost_cents == 0
    assert quote.destination_cost_per_thousand == 0


@pytest.mark.parametrize("quantity,bonus", [(0, 10), (-5, 10), (1000, -1)])
def test_quote_transfer_rejects_invalid_input(quantity, bonus):
    with pytest.raises(InvalidTransferError):
        quote_transfer(quantity, bonus, Decimal("20"))


def test_summarize_position_weighted_average():
    # Bought 10,000 for R$ 200 and 30,000 for R$ 900, then sold 15,000
    position = summarize_position("acc", "prog", 25000, 40000, 110000)

    assert position.balance_quantity == 25000
    assert position.average_cost_per_thousand == Decimal("27.5")


def test_summarize_empty_position():
    position = summarize_position("acc", "prog", 0, 0, 0)

    assert position.average_cost_per_thousand == 0
