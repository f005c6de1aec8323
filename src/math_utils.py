"""
Revenue Share Engine - Numeric Helpers

Small helpers shared by the allocation engine, the buy-to-earn simulator
and the payback estimator. All engine math runs at full float precision;
rounding is only ever applied as a final pass over a result tree.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

# Default number of fractional digits for rounded results (cents)
DEFAULT_ROUNDING_DIGITS = 2

# Tolerance used when comparing computed money amounts
DEFAULT_EPSILON = 1e-5


def is_numeric(value: Any) -> bool:
    """Check if a value is a finite real number (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def round_to_digits(value: float, digits: int = DEFAULT_ROUNDING_DIGITS) -> float:
    """
    Round a value half-up to a fixed number of fractional digits.

    Args:
        value: Value to round
        digits: Number of fractional digits to keep

    Returns:
        Rounded value as a float
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_to_cents(value: float) -> float:
    """Round a value to two decimal places."""
    return round_to_digits(value, 2)


def round_numeric_leaves(tree: Any, digits: int = DEFAULT_ROUNDING_DIGITS) -> Any:
    """
    Round every float leaf of a nested dict/list structure.

    Integers, bools, strings and None pass through unchanged, so counts
    and sale positions are never altered.
    """
    if isinstance(tree, dict):
        return {key: round_numeric_leaves(value, digits) for key, value in tree.items()}
    if isinstance(tree, list):
        return [round_numeric_leaves(item, digits) for item in tree]
    if isinstance(tree, float) and math.isfinite(tree):
        return round_to_digits(tree, digits)
    return tree


def calculate_percentage(value: float, percentage: float) -> float:
    """Return `percentage` percent of `value`."""
    return (value * percentage) / 100


def distribute_evenly(value: float, count: int) -> float:
    """Individual share of `value` split among `count` items (0 when empty)."""
    if count <= 0:
        return 0.0
    return value / count


def approximately_equal(a: float, b: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    """Check if two floats are within `epsilon` of each other."""
    return abs(a - b) < epsilon


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp a value into [minimum, maximum]."""
    return min(max(value, minimum), maximum)


def format_currency(value: float, symbol: str = "$", digits: int = DEFAULT_ROUNDING_DIGITS) -> str:
    """Format an amount for display, e.g. ``$1,234.50``."""
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(round_to_digits(value, digits)):,.{digits}f}"
