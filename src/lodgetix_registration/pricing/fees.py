"""
Processing Fee Estimates

Advisory card-fee estimates for the review step, using the card rates in
EnginePolicy. The payment service charges the real fee.

Two modes:
- pass_to_customer: the fee is added so the organiser receives the full
  subtotal: total = (subtotal + fixed) / (1 - percentage)
- absorb: the customer pays the subtotal and the organiser bears the fee

The platform fee is always calculated on the subtotal only.
"""

from decimal import Decimal
from typing import Literal

from lodgetix_registration.kernel.money import ZERO, quantize_money
from lodgetix_registration.kernel.policy import EnginePolicy
from lodgetix_registration.pricing.models import FeeBreakdown

FeeMode = Literal["pass_to_customer", "absorb"]


def calculate_processing_fees(
    subtotal: Decimal,
    policy: EnginePolicy | None = None,
    fee_mode: FeeMode | None = None,
    is_domestic: bool = True,
) -> FeeBreakdown:
    """
    Estimate processing and platform fees for a subtotal

    Args:
        subtotal: Order subtotal
        policy: Engine policy holding card rates (defaults apply when None)
        fee_mode: Overrides policy.fee_mode
        is_domestic: Domestic or international card rate

    Returns:
        FeeBreakdown with every amount rounded to cents. A zero subtotal
        yields zero fees.

    Example:
        >>> calculate_processing_fees(Decimal("100.00")).total
        Decimal('102.03')
    """
    policy = policy or EnginePolicy()
    mode: FeeMode = fee_mode or policy.fee_mode
    subtotal = quantize_money(subtotal)

    if subtotal <= 0:
        return FeeBreakdown(
            subtotal=ZERO,
            processing_fee=ZERO,
            platform_fee=ZERO,
            total=ZERO,
            fee_mode=mode,
            is_domestic=is_domestic,
        )

    rate = policy.card_rate(is_domestic)
    platform_fee = subtotal * policy.platform_fee_percentage

    if mode == "pass_to_customer":
        total = (subtotal + rate.fixed) / (Decimal("1") - rate.percentage)
        processing_fee = total - subtotal
    else:
        processing_fee = subtotal * rate.percentage + rate.fixed
        total = subtotal

    return FeeBreakdown(
        subtotal=subtotal,
        processing_fee=quantize_money(processing_fee),
        platform_fee=quantize_money(platform_fee),
        total=quantize_money(total),
        fee_mode=mode,
        is_domestic=is_domestic,
    )


def is_domestic_card(country_code: str | None, domestic_country: str = "AU") -> bool:
    """
    Decide whether a card is domestic from its billing country

    Unknown countries are treated as international.
    """
    if not country_code:
        return False
    return country_code.upper() == domestic_country


def processing_fee_label(is_domestic: bool) -> str:
    return "Processing Fee" if is_domestic else "International Processing Fee"
