"""Unit tests for pt-BR display formatting"""

from datetime import date
from decimal import Decimal
from miles_ledger.utils.formatting import (
    format_cents,
    format_cost_per_thousand,
    format_currency,
    format_date,
    format_quantity,
)


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "R$ 1.234,50"
    assert format_currency(0) == "R$ 0,00"
    assert format_currency(999) == "R$ 999,00"
    assert format_currency(1234567.891) == "R$ 1.234.567,89"
    assert format_currency(Decimal("-10")) == "-R$ 10,00"


def test_format_currency_null_and_nan_render_zero():
    assert format_currency(None) == "R$ 0,00"
    assert format_currency(float("nan")) == "R$ 0,00"
    assert format_currency(Decimal("NaN")) == "R$ 0,00"
    assert format_cents(None) == "R$ 0,00"


def test_format_cents():
    assert format_cents(4651) == "R$ 46,51"
    assert format_cents(120000) == "R$ 1.200,00"


def test_format_cost_per_thousand_rounds_to_two_places():
    assert format_cost_per_thousand(Decimal("21.456")) == "R$ 21,46"
    assert format_cost_per_thousand(None) == "R$ 0,00"


def test_format_quantity():
    assert format_quantity(1234567) == "1.234.567"
    assert format_quantity(999) == "999"
    assert format_quantity(-15000) == "-15.000"
    assert format_quantity(None) == "0"


def test_format_date():
    assert format_date(date(2024, 4, 27)) == "27/04/2024"
