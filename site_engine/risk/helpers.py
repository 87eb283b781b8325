"""
Shared helpers for the risk evaluators.
"""

import math


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Constrain value to [minimum, maximum]."""
    return max(minimum, min(maximum, value))


def round_half_up(value: float, places: int = 2) -> float:
    """Round half up to a fixed number of decimal places."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def fmt_number(value: float) -> str:
    """Shortest round-trip form, without a trailing '.0' (30.0 -> '30', 2.5 -> '2.5')."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def fmt_gbp(value: float) -> str:
    """Money amount with thousands separators and at most three decimals."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def fmt_pct(value: float) -> str:
    """One-decimal percentage figure, as used in factor text."""
    return f"{value:.1f}"
