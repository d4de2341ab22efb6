"""
Pricing Models - Derived totals and display summaries

Nothing here is ever set by hand. OrderSummary and FeeBreakdown are
always computed from a SelectionState; TicketSummary is computed from
both for display.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from lodgetix_registration.kernel.money import ZERO
from lodgetix_registration.kernel.wire import WireModel
from lodgetix_registration.selection.models import RegistrationMode


class OrderSummary(WireModel):
    """
    Aggregate totals of one registration

    Advisory only: the payment service re-prices server side.
    """

    function_id: str | None = None
    registration_type: RegistrationMode | None = None
    total_attendees: int = 0
    total_packages: int = 0
    total_tickets: int = 0
    subtotal: Decimal = ZERO


class FeeBreakdown(WireModel):
    """Estimated card processing and platform fees for a subtotal"""

    subtotal: Decimal
    processing_fee: Decimal
    platform_fee: Decimal
    total: Decimal
    fee_mode: Literal["pass_to_customer", "absorb"]
    is_domestic: bool = True


class ZeroPricedItem(BaseModel):
    """A selection entry whose captured price is zero"""

    attendee_id: str | None
    kind: Literal["package", "ticket", "lodge_package"]
    item_id: str


class SummaryItem(BaseModel):
    label: str
    value: str
    is_package: bool = False
    is_sub_item: bool = False
    is_highlight: bool = False


class SummarySection(BaseModel):
    title: str
    items: list[SummaryItem] = Field(default_factory=list)


class TicketSummary(BaseModel):
    """Display sections for the order review step"""

    sections: list[SummarySection] = Field(default_factory=list)
    footer: str | None = None
    empty_message: str = "No tickets selected yet"
