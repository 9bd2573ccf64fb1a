"""
Monetary helpers: loose value parsing, quantity coercion, cent rounding
and currency code normalization.
"""

import math
import re
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping

CENTS = Decimal("0.01")

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def to_decimal(value: Any) -> Decimal | None:
    """
    Normalize a loosely typed monetary value to Decimal.

    Accepts numbers, numeric strings and structured values such as
    ``{"value": "337.50", "currency": "USD"}`` (``value``, ``amount`` or
    ``price`` keys).

    Returns:
        Decimal | None: None when the value is missing or not a finite number
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, Mapping):
        inner = value.get("value")
        if inner is None:
            inner = value.get("amount")
        if inner is None:
            inner = value.get("price")
        return to_decimal(inner)

    if isinstance(value, float) and not math.isfinite(value):
        return None

    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None

    if not number.is_finite():
        return None
    return number


def to_quantity(value: Any, fallback: int = 1) -> int:
    """
    Coerce a submitted quantity to a positive integer.

    Non-numeric input or anything below 1 after flooring falls back to
    ``fallback``.
    """
    number = to_decimal(value)
    if number is None:
        return fallback
    quantity = int(number.to_integral_value(rounding=ROUND_FLOOR))
    return quantity if quantity >= 1 else fallback


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half up."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def normalize_currency(code: Any) -> str | None:
    """Upper-case and trim a currency code; None if it is not 3 letters."""
    normalized = str(code or "").strip().upper()
    return normalized if _CURRENCY_RE.match(normalized) else None
