"""
Pricing Aggregator - Order totals from selection state

Pure functions. Totals are derived from the captured unit price on each
selection entry; the catalog and captured metadata are never consulted,
so a total computed today equals the total computed when the selection
was made.

Packages are charged at their own price. The tickets a package includes
count towards ticket totals but never towards the subtotal.
"""

from decimal import Decimal

from lodgetix_registration.kernel.money import ZERO, quantize_money
from lodgetix_registration.pricing.models import OrderSummary, ZeroPricedItem
from lodgetix_registration.selection.invariants import validate_price, validate_quantity
from lodgetix_registration.selection.models import (
    AttendeeSelection,
    RegistrationMode,
    SelectionState,
)


def compute_attendee_subtotal(selection: AttendeeSelection) -> Decimal:
    """
    Sum one attendee's selections at their captured prices

    subtotal = sum(package.quantity * package.unit_price)
             + sum(ticket.quantity * ticket.unit_price)

    Raises:
        InvalidQuantity: If an entry has a quantity below one
        NegativePrice: If an entry has a negative captured price
    """
    total = ZERO
    for package in selection.packages:
        validate_quantity(package.package_id, package.quantity)
        validate_price(package.package_id, package.unit_price)
        total += package.unit_price * package.quantity
    for ticket in selection.individual_tickets:
        validate_quantity(ticket.ticket_id, ticket.quantity)
        validate_price(ticket.ticket_id, ticket.unit_price)
        total += ticket.unit_price * ticket.quantity
    return quantize_money(total)


def count_attendee_tickets(selection: AttendeeSelection) -> int:
    """
    Count the tickets one attendee's selections deliver

    Individual ticket quantities plus, for each package entry, the
    quantities of its included tickets (package quantity x tickets per package).
    """
    individual = sum(t.quantity for t in selection.individual_tickets)
    packaged = sum(p.ticket_count() for p in selection.packages)
    return individual + packaged


def compute_order_summary(
    mode: RegistrationMode | None, state: SelectionState
) -> OrderSummary:
    """
    Compute the order totals for a registration

    Args:
        mode: Registration type to aggregate for
        state: Current selection state

    Returns:
        OrderSummary. For lodge registrations every count comes from the
        bulk selection (all zero when there is none); attendees counts the
        seats the purchase will generate.

    Raises:
        InvalidQuantity: If an entry has a quantity below one
        NegativePrice: If an entry has a negative captured price

    Example:
        Lodge, 2 x table package (10 seats, $1950):
        totalAttendees=20, totalTickets=20, totalPackages=2, subtotal=3900.00
    """
    if mode is RegistrationMode.LODGE:
        bulk = state.lodge_bulk_selection
        if bulk is None:
            return OrderSummary(function_id=state.function_id, registration_type=mode)
        validate_quantity(bulk.package_id, bulk.quantity)
        validate_price(bulk.package_id, bulk.unit_price)
        return OrderSummary(
            function_id=state.function_id,
            registration_type=mode,
            total_attendees=bulk.will_generate_tickets,
            total_packages=bulk.quantity,
            total_tickets=bulk.will_generate_tickets,
            subtotal=quantize_money(bulk.subtotal),
        )

    subtotal = ZERO
    total_tickets = 0
    total_packages = 0
    total_attendees = 0
    for selection in state.attendee_selections.values():
        subtotal += compute_attendee_subtotal(selection)
        total_tickets += count_attendee_tickets(selection)
        total_packages += sum(p.quantity for p in selection.packages)
        if not selection.is_empty():
            total_attendees += 1

    return OrderSummary(
        function_id=state.function_id,
        registration_type=mode,
        total_attendees=total_attendees,
        total_packages=total_packages,
        total_tickets=total_tickets,
        subtotal=quantize_money(subtotal),
    )


def find_zero_priced_items(state: SelectionState) -> list[ZeroPricedItem]:
    """
    List selection entries with a zero captured price

    A zero price usually means the entry was converted from a legacy
    draft without a catalog; the payment step should refuse to proceed
    while any remain.
    """
    items: list[ZeroPricedItem] = []
    for attendee_id, selection in state.attendee_selections.items():
        for package in selection.packages:
            if package.unit_price == 0:
                items.append(
                    ZeroPricedItem(attendee_id=attendee_id, kind="package", item_id=package.package_id)
                )
        for ticket in selection.individual_tickets:
            if ticket.unit_price == 0:
                items.append(
                    ZeroPricedItem(attendee_id=attendee_id, kind="ticket", item_id=ticket.ticket_id)
                )
    bulk = state.lodge_bulk_selection
    if bulk is not None and bulk.unit_price == 0:
        items.append(ZeroPricedItem(attendee_id=None, kind="lodge_package", item_id=bulk.package_id))
    return items
