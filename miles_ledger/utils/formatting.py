"""pt-BR display formatting for currency, quantities and dates"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from miles_ledger.config import settings
from miles_ledger.domain.money import TWO_PLACES, from_cents

Number = Union[Decimal, int, float]


def _group_thousands(digits: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return ".".join(groups)


def _to_decimal(value: Optional[Number]) -> Decimal:
    """None, NaN and infinities render as zero"""
    if value is None:
        return Decimal("0")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")
    if not number.is_finite():
        return Decimal("0")
    return number


def format_currency(value: Optional[Number]) -> str:
    """
    Render an amount in currency units: 1234.5 -> "R$ 1.234,50".

    Unvalidated optional fields are common at call sites, so None and NaN
    render as the zero amount instead of raising.
    """
    amount = _to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    integer_part, fraction = f"{abs(amount):.2f}".split(".")
    return f"{sign}{settings.currency_symbol} {_group_thousands(integer_part)},{fraction}"


def format_cents(cents: Optional[int]) -> str:
    """Render integer cents as currency"""
    if cents is None:
        return format_currency(None)
    return format_currency(from_cents(cents))


def format_cost_per_thousand(value: Optional[Number]) -> str:
    """CPM is shown as currency with exactly two decimals"""
    return format_currency(value)


def format_quantity(value: Optional[Number]) -> str:
    """Render a miles quantity with pt-BR grouping: 1234567 -> "1.234.567" """
    number = _to_decimal(value).to_integral_value(rounding=ROUND_HALF_UP)
    sign = "-" if number < 0 else ""
    return f"{sign}{_group_thousands(str(abs(int(number))))}"


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")
