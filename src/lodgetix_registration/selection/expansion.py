"""
Package Expansion - Packages into attributable ticket instances

A package is a derived view over its included tickets. Expanding it
yields one line item per ticket copy, each tagged with the package it
came from, so tickets generated later can be traced back to the
package purchase that paid for them.

Expansion never prices anything: the package is charged once at its own
captured price, and the line items carry no price at all.
"""

from collections.abc import Iterable

from lodgetix_registration.catalog.models import PackageDefinition
from lodgetix_registration.kernel.ids import IdFactory, default_id_factory
from lodgetix_registration.selection.invariants import (
    validate_package_includes,
    validate_quantity,
)
from lodgetix_registration.selection.models import TicketLineItem, TicketQuantity


def expand(
    package: PackageDefinition,
    attendee_id: str,
    quantity: int = 1,
    id_factory: IdFactory | None = None,
) -> list[TicketLineItem]:
    """
    Expand a package purchase into ticket line items

    Args:
        package: Captured package definition
        attendee_id: Attendee the tickets belong to
        quantity: Number of copies of the package bought
        id_factory: Source of ticket record ids

    Returns:
        quantity line items per included ticket, in include order

    Raises:
        EmptyPackageIncludes: If the package includes no tickets
        InvalidQuantity: If quantity < 1

    Example:
        >>> items = expand(package_with_two_tickets, "att-1", quantity=3)
        >>> len(items)
        6
    """
    validate_package_includes(package)
    validate_quantity(package.package_id, quantity)
    factory = id_factory or default_id_factory

    return [
        TicketLineItem(
            attendee_id=attendee_id,
            ticket_id=ticket_id,
            package_id=package.package_id,
            quantity=1,
            ticket_record_id=factory.generate(),
        )
        for ticket_id in package.included_ticket_ids
        for _ in range(quantity)
    ]


def collapse_line_items(line_items: Iterable[TicketLineItem]) -> list[TicketQuantity]:
    """
    Aggregate line items into {ticketId, quantity} entries

    This is the provenance list stored on a package selection. Order
    follows the first appearance of each ticket id.
    """
    counts: dict[str, int] = {}
    for item in line_items:
        counts[item.ticket_id] = counts.get(item.ticket_id, 0) + item.quantity
    return [TicketQuantity(ticket_id=ticket_id, quantity=q) for ticket_id, q in counts.items()]
