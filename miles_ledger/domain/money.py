"""
Fixed-point money helpers.

Amounts travel through the system as integer cents. Conversion from user
input happens here and nowhere else:

    parse_amount("R$ 1.200,00")  -> Decimal("1200.00")
    to_cents("R$ 46,51")         -> 4651
    from_cents(4651)             -> Decimal("46.51")
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from miles_ledger.domain.exceptions import InvalidMonetaryValue

TWO_PLACES = Decimal(10) ** -2
RATE_PLACES = Decimal(10) ** -4
CENTS_PER_UNIT = 100

AmountInput = Union[str, int, float, Decimal]

_CURRENCY_PREFIX = re.compile(r"^(R\$|BRL)\s*", re.IGNORECASE)
_THOUSANDS_GROUPED = re.compile(r"^\d{1,3}(\.\d{3})+$")


def parse_amount(value: AmountInput) -> Decimal:
    """
    Parse a currency value into a Decimal.

    Accepts Decimal, int, float (converted via str) and strings in either
    pt-BR ("1.234,56", "R$ 46,51", "R$ 1.200") or plain ("1234.56") notation.
    When a string contains a comma, or its dots group digits in threes
    ("1.200.000"), dots are thousands separators. A currency-prefixed string
    with any other dot is ambiguous and rejected.

    Raises:
        InvalidMonetaryValue: empty, non-numeric or non-finite input
    """
    if isinstance(value, bool):
        raise InvalidMonetaryValue(f"Not a monetary value: {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace("\xa0", " ")
        negative = text.startswith("-")
        if negative:
            text = text[1:].strip()
        prefixed = bool(_CURRENCY_PREFIX.match(text))
        text = _CURRENCY_PREFIX.sub("", text).replace(" ", "")
        if "," in text or _THOUSANDS_GROUPED.match(text):
            text = text.replace(".", "").replace(",", ".")
        elif prefixed and "." in text:
            # "R$ 12.5" is neither pt-BR grouping nor pt-BR decimals
            raise InvalidMonetaryValue(f"Ambiguous monetary value: {value!r}")
        if not text:
            raise InvalidMonetaryValue(f"Empty monetary value: {value!r}")
        try:
            result = Decimal(text)
        except InvalidOperation as e:
            raise InvalidMonetaryValue(f"Not a monetary value: {value!r}") from e
        if negative:
            result = -result
    else:
        raise InvalidMonetaryValue(f"Unsupported monetary type: {type(value).__name__}")

    if not result.is_finite():
        raise InvalidMonetaryValue(f"Not a finite monetary value: {value!r}")
    return result


def to_cents(value: AmountInput) -> int:
    """Convert a currency value to integer cents, rounding half-up"""
    amount = parse_amount(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return int(amount * CENTS_PER_UNIT)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents to a two-place Decimal"""
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(TWO_PLACES)


def round_rate(value: Decimal, places: Decimal = RATE_PLACES) -> Decimal:
    """Round a derived rate (CPM, margin) for presentation"""
    return value.quantize(places, rounding=ROUND_HALF_UP)
