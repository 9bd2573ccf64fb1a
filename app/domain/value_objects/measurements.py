"""
Unit conversion for product shipping measurements.

Carrier APIs work in kilograms and centimeters; products may be catalogued
in any supported unit. A `None` result means "measurement missing" and must
never be treated as zero by callers.
"""

import math
from typing import Any

GRAMS_PER_KG = 1000
KG_PER_LB = 0.45359237
KG_PER_OZ = 0.028349523125
CM_PER_IN = 2.54

WEIGHT_UNITS = frozenset({"kg", "g", "lb", "oz"})
LENGTH_UNITS = frozenset({"cm", "in"})


def _positive_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def _unit_tag(unit: Any, default: str) -> str:
    tag = str(unit).strip().lower() if unit is not None else ""
    return tag or default


def to_kilograms(value: Any, unit: Any = "kg") -> float | None:
    """
    Convert a weight to kilograms.

    Args:
        value: Numeric weight (numbers or numeric strings)
        unit: One of kg, g, lb, oz (case-insensitive, default kg)

    Returns:
        float | None: Kilograms, or None if the value is not a finite
        positive number or the unit is not recognized
    """
    number = _positive_number(value)
    if number is None:
        return None

    tag = _unit_tag(unit, "kg")
    if tag == "kg":
        return number
    if tag == "g":
        return number / GRAMS_PER_KG
    if tag == "lb":
        return number * KG_PER_LB
    if tag == "oz":
        return number * KG_PER_OZ
    return None


def to_centimeters(value: Any, unit: Any = "cm") -> float | None:
    """
    Convert a length to centimeters.

    Args:
        value: Numeric length
        unit: One of cm, in (case-insensitive, default cm)

    Returns:
        float | None: Centimeters, or None when unconvertible
    """
    number = _positive_number(value)
    if number is None:
        return None

    tag = _unit_tag(unit, "cm")
    if tag == "cm":
        return number
    if tag == "in":
        return number * CM_PER_IN
    return None
