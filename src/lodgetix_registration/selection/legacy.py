"""
Legacy Adapter - The one-package-per-attendee selection shape

Early drafts stored one {ticketDefinitionId, selectedEvents} record per
attendee. The enhanced shape (packages / individualTickets with
quantities) can express everything the legacy one can, so conversion
towards it is total. The other direction loses information; it is only
available through summarize_as_legacy, which reports exactly what was
dropped.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

from lodgetix_registration.catalog.models import Catalog
from lodgetix_registration.kernel.money import ZERO, quantize_money
from lodgetix_registration.selection.models import (
    AnySelection,
    AttendeeSelection,
    EnhancedSelection,
    LegacySelection,
    PackageSelection,
    SelectionState,
    TicketQuantity,
    TicketSelectionItem,
)

_selection_adapter: TypeAdapter[LegacySelection | EnhancedSelection] = TypeAdapter(AnySelection)

_LEGACY_KEYS = ("ticketDefinitionId", "ticket_definition_id", "selectedEvents", "selected_events")


def parse_selection(raw: Mapping[str, Any]) -> LegacySelection | EnhancedSelection:
    """
    Decide which shape a raw selection record has, once

    Records carrying an explicit "shape" key are trusted. Otherwise the
    presence of legacy keys selects the legacy shape and anything else
    is read as enhanced.

    Raises:
        pydantic.ValidationError: If the record does not fit the chosen shape
    """
    data = dict(raw)
    if "shape" not in data:
        is_legacy = any(key in data for key in _LEGACY_KEYS)
        data["shape"] = "legacy" if is_legacy else "enhanced"
    return _selection_adapter.validate_python(data)


def _captured_price(catalog: Catalog | None, kind: str, item_id: str) -> Decimal:
    if catalog is None:
        return ZERO
    definition = catalog.get_package(item_id) if kind == "package" else catalog.get_ticket(item_id)
    return quantize_money(definition.price) if definition is not None else ZERO


def legacy_to_attendee_selection(
    legacy: LegacySelection, catalog: Catalog | None = None
) -> AttendeeSelection:
    """
    Convert one legacy record

    - ticketDefinitionId set: one package (quantity 1) whose tickets are
      the selected events
    - no ticketDefinitionId but selected events: one individual ticket per event
    - neither: an empty selection

    Prices come from the catalog when given; otherwise they are zero and
    find_zero_priced_items reports the entries.
    """
    if legacy.ticket_definition_id:
        return AttendeeSelection(
            packages=[
                PackageSelection(
                    package_id=legacy.ticket_definition_id,
                    quantity=1,
                    tickets=[
                        TicketQuantity(ticket_id=event_id, quantity=1)
                        for event_id in legacy.selected_events
                    ],
                    unit_price=_captured_price(catalog, "package", legacy.ticket_definition_id),
                )
            ]
        )
    if legacy.selected_events:
        return AttendeeSelection(
            individual_tickets=[
                TicketSelectionItem(
                    ticket_id=event_id,
                    quantity=1,
                    unit_price=_captured_price(catalog, "ticket", event_id),
                )
                for event_id in legacy.selected_events
            ]
        )
    return AttendeeSelection()


def to_enhanced(
    legacy_map: Mapping[str, Mapping[str, Any] | LegacySelection],
    catalog: Catalog | None = None,
) -> dict[str, AttendeeSelection]:
    """
    Convert a legacy attendee map to enhanced selections

    Args:
        legacy_map: attendee id -> legacy record (model or raw mapping)
        catalog: Captured catalog used to price the converted entries

    Returns:
        attendee id -> AttendeeSelection, one entry per input attendee

    Example:
        >>> enhanced = to_enhanced({"att-1": {"ticketDefinitionId": "pkg_789", "selectedEvents": ["et_123"]}})
        >>> enhanced["att-1"].packages[0].tickets
        [TicketQuantity(ticket_id='et_123', quantity=1)]
    """
    enhanced: dict[str, AttendeeSelection] = {}
    for attendee_id, record in legacy_map.items():
        legacy = record if isinstance(record, LegacySelection) else LegacySelection.model_validate(
            {**record, "shape": "legacy"}
        )
        enhanced[attendee_id] = legacy_to_attendee_selection(legacy, catalog)
    return enhanced


def normalize_selection(
    raw: Mapping[str, Any], catalog: Catalog | None = None
) -> AttendeeSelection:
    """Read a raw record of either shape as an AttendeeSelection"""
    parsed = parse_selection(raw)
    if isinstance(parsed, LegacySelection):
        return legacy_to_attendee_selection(parsed, catalog)
    return AttendeeSelection(
        packages=parsed.packages, individual_tickets=parsed.individual_tickets
    )


# ============================================================================
# Lossy reverse direction
# ============================================================================


class LegacySummary(BaseModel):
    """A legacy record plus every fact it could not carry"""

    selection: LegacySelection
    dropped: list[str] = Field(default_factory=list)

    @property
    def is_lossless(self) -> bool:
        return not self.dropped


def summarize_as_legacy(selection: AttendeeSelection) -> LegacySummary:
    """
    Describe an enhanced selection in the legacy shape

    The legacy shape holds one package id and a flat list of event ids,
    all implicitly quantity 1. Anything beyond that is listed in dropped.
    Never used implicitly; callers that need the legacy shape must decide
    what to do with the dropped facts.
    """
    dropped: list[str] = []

    if selection.packages:
        first, *others = selection.packages
        if first.quantity > 1:
            dropped.append(f"Package {first.package_id} quantity {first.quantity} reduced to 1")
        for package in others:
            dropped.append(f"Additional package {package.package_id} dropped")
        for ticket in selection.individual_tickets:
            dropped.append(f"Individual ticket {ticket.ticket_id} beside package dropped")
        events = [t.ticket_id for t in first.tickets]
        legacy = LegacySelection(ticket_definition_id=first.package_id, selected_events=events)
        return LegacySummary(selection=legacy, dropped=dropped)

    events = []
    for ticket in selection.individual_tickets:
        if ticket.quantity > 1:
            dropped.append(f"Ticket {ticket.ticket_id} quantity {ticket.quantity} reduced to 1")
        events.append(ticket.ticket_id)
    return LegacySummary(
        selection=LegacySelection(ticket_definition_id=None, selected_events=events),
        dropped=dropped,
    )


def legacy_packages_view(state: SelectionState) -> dict[str, LegacySummary]:
    """Project every attendee of a state into the legacy shape, with losses reported"""
    return {
        attendee_id: summarize_as_legacy(selection)
        for attendee_id, selection in state.attendee_selections.items()
    }
