"""
GuestDesk Money Primitive - Decimal amounts and rupee display
=============================================================
Backend amounts arrive as NUMERIC (strings, ints or floats once they
have crossed JSON). Everything is coerced to Decimal at the boundary;
floats never take part in folio arithmetic.

Display follows the en-IN convention used on the folio screens:
lakh grouping (1,50,000), at most two fraction digits, trailing
zeros dropped.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

RUPEE = "₹"
ZERO = Decimal(0)

_TWO_PLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a backend amount to Decimal.

    Raises ValueError for None, booleans, non-numeric strings and
    non-finite values.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"amount must be numeric, got {value!r}.")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f"amount must be numeric, got {value!r}.") from exc
    if not result.is_finite():
        raise ValueError(f"amount must be finite, got {value!r}.")
    return result


def group_indian(digits: str) -> str:
    """Group an unsigned integer string the en-IN way: 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_amount(amount: Decimal) -> str:
    """1500 -> '1,500'; 1500.50 -> '1,500.5'; -20 -> '-20'."""
    quantized = amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    whole, _, fraction = f"{abs(quantized):f}".partition(".")
    fraction = fraction.rstrip("0")
    text = group_indian(whole)
    if fraction:
        text = f"{text}.{fraction}"
    return f"{sign}{text}"


def format_inr(amount: Decimal, symbol: str = RUPEE) -> str:
    """Amount with the currency symbol glued on: '₹1,50,000'."""
    return f"{symbol}{format_amount(amount)}"
