"""
Pricing - Order totals, fee estimates and review-step summaries
"""

from lodgetix_registration.pricing.models import (
    FeeBreakdown,
    OrderSummary,
    SummaryItem,
    SummarySection,
    TicketSummary,
    ZeroPricedItem,
)

__all__ = [
    "FeeBreakdown",
    "OrderSummary",
    "SummaryItem",
    "SummarySection",
    "TicketSummary",
    "ZeroPricedItem",
]
