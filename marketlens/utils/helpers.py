"""Helper utilities for MarketLens."""

import math
from typing import Any, Optional


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a value into ``[low, high]``."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return math.floor(value + 0.5)


def round1(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def coerce_float(value: Any) -> Optional[float]:
    """Convert loosely-typed numeric input to a finite float.

    Args:
        value: Raw value (number, numeric string, None, ...)

    Returns:
        Float value, or None if missing, non-numeric, NaN or infinite
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def format_percentage(value: Optional[float], decimals: int = 1) -> str:
    """Format a 0-100 percentage for display.

    Args:
        value: Percentage value (0-100)
        decimals: Decimal places

    Returns:
        Formatted percentage string
    """
    if value is None:
        return "N/A"
    return f"{value:.{decimals}f}%"


def format_signed(value: float, decimals: int = 2) -> str:
    """Format a number with an explicit leading sign for non-negatives."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{decimals}f}"


def labels_match(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive, whitespace-trimmed label comparison."""
    if a is None or b is None:
        return False
    return a.strip().lower() == b.strip().lower()
