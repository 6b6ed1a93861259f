"""Money helpers: finite-number checks and half-up rounding"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any


def is_finite_number(value: Any) -> bool:
    """True for int/float/Decimal values that are finite (bool is not a number here)"""
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    return False


def to_decimal(value: Any) -> Decimal:
    """Convert via str() so 0.1 stays 0.1 instead of its binary expansion"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Any, places: int = 2) -> float:
    """
    Round using standard (half-up) rounding, not Python's banker's rounding.

    Example:
        round(2.675, 2) == 2.67 but round_half_up(2.675) == 2.68
    """
    quantum = Decimal(1).scaleb(-places)
    return float(to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
