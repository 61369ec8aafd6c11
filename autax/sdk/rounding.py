"""Currency rounding helpers.

All rounding is half-up (0.5 rounds away from zero), matching ATO practice
for withholding amounts and assessment figures. Decimal arithmetic avoids
binary float artefacts such as round(2.675, 2) == 2.67.
"""

from decimal import Decimal, ROUND_HALF_UP

_CENT = Decimal("0.01")
_DOLLAR = Decimal("1")


def round_cents(amount: float) -> float:
    """Round to 2 decimal places, half-up.

    Example: 1234.565 -> 1234.57
    """
    return float(Decimal(repr(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def round_dollars(amount: float) -> float:
    """Round to whole dollars, half-up.

    Example: 394.5 -> 395.0
    """
    return float(Decimal(repr(amount)).quantize(_DOLLAR, rounding=ROUND_HALF_UP))


def format_currency(amount: float, cents: bool = False) -> str:
    """Format an amount for step explanations, e.g. $1,234 or -$1,234.56."""
    sign = "-" if amount < 0 else ""
    if cents:
        return f"{sign}${abs(amount):,.2f}"
    return f"{sign}${abs(amount):,.0f}"
