"""
Money helpers

All prices are Decimal. Aggregated amounts are quantized to cents with
half-up rounding, matching how card processors round.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(amount: Decimal | int | str) -> Decimal:
    """Round an amount to cents (half-up)"""
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, symbol: str = "$") -> str:
    """
    Format an amount for display

    Example:
        >>> format_currency(Decimal("3900"))
        '$3,900.00'
    """
    return f"{symbol}{quantize_money(amount):,.2f}"
