"""
Ticket Summary - Display sections for the order review step

Builds the review-step breakdown from selection state: one section per
attendee (or one lodge order section), an order total section and a
footer line. Amounts come from the captured prices on the selection
entries; the catalog and captured metadata only supply names.
"""

from collections.abc import Mapping

from lodgetix_registration.catalog.metadata import PackageMetadata, TicketMetadata
from lodgetix_registration.catalog.models import Catalog
from lodgetix_registration.kernel.money import format_currency
from lodgetix_registration.pricing.aggregator import compute_attendee_subtotal
from lodgetix_registration.pricing.models import (
    FeeBreakdown,
    OrderSummary,
    SummaryItem,
    SummarySection,
    TicketSummary,
)
from lodgetix_registration.selection.models import RegistrationMode, SelectionState


class _NameResolver:
    def __init__(
        self,
        catalog: Catalog | None,
        ticket_metadata: Mapping[str, TicketMetadata],
        package_metadata: Mapping[str, PackageMetadata],
    ) -> None:
        self.catalog = catalog
        self.ticket_metadata = ticket_metadata
        self.package_metadata = package_metadata

    def ticket(self, ticket_id: str) -> str:
        if self.catalog is not None and (ticket := self.catalog.get_ticket(ticket_id)):
            return ticket.name
        if ticket_id in self.ticket_metadata:
            return self.ticket_metadata[ticket_id].name
        return ticket_id

    def package(self, package_id: str) -> str:
        if self.catalog is not None and (package := self.catalog.get_package(package_id)):
            return package.name
        if package_id in self.package_metadata:
            return self.package_metadata[package_id].name
        return package_id

    def includes_description(self, package_id: str) -> list[str]:
        if self.catalog is not None and (package := self.catalog.get_package(package_id)):
            return list(package.includes_description)
        if package_id in self.package_metadata:
            return list(self.package_metadata[package_id].includes_description or [])
        return []


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def build_ticket_summary(
    state: SelectionState,
    catalog: Catalog | None,
    summary: OrderSummary,
    ticket_metadata: Mapping[str, TicketMetadata] | None = None,
    package_metadata: Mapping[str, PackageMetadata] | None = None,
    attendee_names: Mapping[str, str] | None = None,
    fees: FeeBreakdown | None = None,
) -> TicketSummary:
    """
    Build display sections for the review step

    Args:
        state: Selection state to describe
        catalog: Captured catalog (names only)
        summary: Order summary for the same state
        ticket_metadata/package_metadata: Captured snapshots, used for names
            when the catalog no longer holds an entry
        attendee_names: attendee id -> display name
        fees: Fee estimate to show in the total section

    Returns:
        TicketSummary. Package lines carry the package price; each included
        ticket is shown beneath it as "Included" with no charge.
    """
    names = _NameResolver(catalog, ticket_metadata or {}, package_metadata or {})
    attendee_names = attendee_names or {}
    sections: list[SummarySection] = []
    is_lodge = summary.registration_type is RegistrationMode.LODGE
    bulk = state.lodge_bulk_selection

    if is_lodge and bulk is not None:
        items = [
            SummaryItem(label="Total Attendees", value=f"{summary.total_attendees} people"),
            SummaryItem(
                label=names.package(bulk.package_id),
                value=format_currency(bulk.subtotal),
                is_package=True,
            ),
        ]
        for description in names.includes_description(bulk.package_id):
            items.append(SummaryItem(label=f"  • {description}", value="Included", is_sub_item=True))
        sections.append(
            SummarySection(title=f"Lodge Order ({bulk.will_generate_tickets} tickets)", items=items)
        )
    elif not is_lodge:
        for attendee_id, selection in state.attendee_selections.items():
            items = []
            for package in selection.packages:
                label = names.package(package.package_id)
                if package.quantity > 1:
                    label = f"{label} x {package.quantity}"
                items.append(
                    SummaryItem(label=label, value=format_currency(package.subtotal()), is_package=True)
                )
                for ticket in package.tickets:
                    items.append(
                        SummaryItem(
                            label=f"  • {names.ticket(ticket.ticket_id)}",
                            value="Included",
                            is_sub_item=True,
                        )
                    )
            for ticket in selection.individual_tickets:
                label = names.ticket(ticket.ticket_id)
                if ticket.quantity > 1:
                    label = f"{label} x {ticket.quantity}"
                items.append(SummaryItem(label=label, value=format_currency(ticket.subtotal())))

            if items:
                items.append(
                    SummaryItem(
                        label="Subtotal",
                        value=format_currency(compute_attendee_subtotal(selection)),
                        is_highlight=True,
                    )
                )
                sections.append(
                    SummarySection(title=attendee_names.get(attendee_id, attendee_id), items=items)
                )

    if sections:
        total_items = [SummaryItem(label="Subtotal", value=format_currency(summary.subtotal))]
        total = summary.subtotal
        if fees is not None:
            if fees.processing_fee > 0 and fees.total > fees.subtotal:
                total_items.append(
                    SummaryItem(label="Processing Fees", value=format_currency(fees.processing_fee))
                )
            total = fees.total
        total_items.append(SummaryItem(label="Total", value=format_currency(total), is_highlight=True))
        sections.append(SummarySection(title="Order Summary", items=total_items))

    footer = None
    if is_lodge and bulk is not None:
        footer = f"{summary.total_tickets} tickets for {summary.total_attendees} lodge members"
    elif summary.total_tickets > 0:
        footer = (
            f"{_plural(summary.total_tickets, 'ticket')} for "
            f"{_plural(summary.total_attendees, 'attendee')}"
        )

    return TicketSummary(sections=sections, footer=footer)
