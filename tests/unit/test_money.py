"""Unit tests for money parsing and conversion"""

import pytest
from decimal import Decimal
from miles_ledger.domain.exceptions import InvalidMonetaryValue
from miles_ledger.domain.money import from_cents, parse_amount, round_rate, to_cents


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("R$ 46,51", Decimal("46.51")),
        ("R$\xa01.200,00", Decimal("1200.00")),
        ("1.234.567,89", Decimal("1234567.89")),
        ("1200.50", Decimal("1200.50")),
        ("-R$ 10,00", Decimal("-10.00")),
        ("BRL 5", Decimal("5")),
        ("R$ 1.200", Decimal("1200")),
        ("1.200.000", Decimal("1200000")),
        ("-R$ 2.500", Decimal("-2500")),
        ("12.5", Decimal("12.5")),
        (1200, Decimal("1200")),
        (0.1, Decimal("0.1")),
        (Decimal("3.333"), Decimal("3.333")),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", ["", "R$", "abc", "12,34,56", "R$ 12.5", "R$ 1.20", "NaN", "Infinity", True, None, [1]])
def test_parse_amount_rejects_garbage(raw):
    with pytest.raises(InvalidMonetaryValue):
        parse_amount(raw)


def test_to_cents_avoids_float_drift():
    # 0.1 + 0.2 as floats is 0.30000000000000004
    assert to_cents(0.1 + 0.2) == 30
    assert to_cents("R$ 46,51") == 4651
    assert to_cents(Decimal("1000.005")) == 100001


def test_from_cents():
    assert from_cents(4651) == Decimal("46.51")
    assert str(from_cents(120000)) == "1200.00"
    assert from_cents(-5) == Decimal("-0.05")


def test_round_rate():
    assert round_rate(Decimal("6.666666666")) == Decimal("6.6667")


def test_thousands_dot_without_cents_is_not_a_decimal_point():
    assert to_cents("R$ 1.200") == 120000
    assert to_cents("1.200.000") == 120000000
