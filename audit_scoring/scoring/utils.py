"""
Decimal Utilities
audit_scoring/scoring/utils.py

Precision-safe rounding and ratio helpers shared by the scorers and the
aggregator. Rounding is always half-up (never banker's rounding).
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional


def as_decimal(value: float) -> Decimal:
    """Exact decimal form of a number as written (0.14 -> Decimal("0.14"))."""
    return Decimal(str(value))


def to_decimal(value: float, places: int = 2) -> Decimal:
    """Convert float to Decimal with explicit precision."""
    return Decimal(str(value)).quantize(
        Decimal(10) ** -places, rounding=ROUND_HALF_UP
    )


def round_half_up(value: float, places: int = 2) -> float:
    """Round to ``places`` decimals, ties away from zero: 0.125 -> 0.13."""
    return float(to_decimal(value, places))


def round_to_int(value: float) -> int:
    """Half-up rounding to an integer: 2.5 -> 3."""
    return int(to_decimal(value, 0))


def percentage(part: float, whole: float) -> float:
    """
    part / whole x 100 with zero protection.

    Returns 0.0 if either operand is zero.
    """
    if part == 0 or whole == 0:
        return 0.0
    return (part / whole) * 100


def parse_number(raw: Any) -> Optional[float]:
    """
    Parse a stored answer into a finite float.

    Returns None for None, blank text, non-numeric text, NaN and infinities.
    Leading numeric text is accepted the way a lenient form field reads it
    ("12 kg" -> 12.0).
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            number = _leading_number(text)
            if number is None:
                return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _leading_number(text: str) -> Optional[float]:
    end = 0
    seen_digit = False
    seen_dot = False
    for i, ch in enumerate(text):
        if ch in "+-" and i == 0:
            end = i + 1
        elif ch.isdigit():
            seen_digit = True
            end = i + 1
        elif ch == "." and not seen_dot:
            seen_dot = True
            end = i + 1
        else:
            break
    if not seen_digit:
        return None
    try:
        return float(text[:end])
    except ValueError:
        return None
