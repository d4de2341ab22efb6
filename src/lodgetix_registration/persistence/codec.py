"""
Persistence Codec - Selection state to and from the draft document

The draft API stores one camelCase JSON document per draft. The
document carries two views of the attendee selections:

- ticketSelections: the unpriced {packages, individualTickets} shape the
  ticket step has always written
- attendeeSelections: the priced view (captured unitPrice, line subtotal,
  attendeeSubtotal) that lets a restored state reproduce its totals

Money is written as decimal strings so a save/load cycle is exact.
Loading validates the whole document with pydantic; a document that does
not fit raises DraftDecodeError instead of yielding a partial state.

Fun fact: drafts saved before quantities existed still load. Their
ticketSelections entries are in the legacy shape and are converted on
the way in.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import Field, ValidationError, field_validator

from lodgetix_registration.catalog.metadata import (
    FunctionMetadata,
    PackageMetadata,
    TicketMetadata,
)
from lodgetix_registration.catalog.models import Catalog
from lodgetix_registration.kernel.errors import DraftDecodeError, InvalidRegistrationMode
from lodgetix_registration.kernel.logging import get_logger
from lodgetix_registration.kernel.money import ZERO, quantize_money
from lodgetix_registration.kernel.wire import WireModel
from lodgetix_registration.pricing.aggregator import (
    compute_attendee_subtotal,
    compute_order_summary,
)
from lodgetix_registration.pricing.models import OrderSummary
from lodgetix_registration.selection.legacy import legacy_to_attendee_selection
from lodgetix_registration.selection.models import (
    AttendeeSelection,
    LegacySelection,
    LodgeBulkSelection,
    PackageSelection,
    RegistrationMode,
    SelectionState,
    TicketQuantity,
    TicketSelectionItem,
)

logger = get_logger(__name__)


# ============================================================================
# Wire shapes
# ============================================================================


class WirePackageSelection(WireModel):
    package_id: str
    quantity: int = Field(ge=1)
    tickets: list[TicketQuantity] = Field(default_factory=list)


class WireTicketSelection(WireModel):
    ticket_id: str
    quantity: int = Field(ge=1)


class WireAttendeeTickets(WireModel):
    """One attendee's entry in ticketSelections"""

    packages: list[WirePackageSelection] = Field(default_factory=list)
    individual_tickets: list[WireTicketSelection] = Field(default_factory=list)


class PricedPackage(WirePackageSelection):
    unit_price: Decimal
    subtotal: Decimal


class PricedTicket(WireTicketSelection):
    unit_price: Decimal
    subtotal: Decimal


class PricedAttendeeSelection(WireModel):
    """One attendee's entry in attendeeSelections"""

    attendee_id: str
    packages: list[PricedPackage] = Field(default_factory=list)
    individual_tickets: list[PricedTicket] = Field(default_factory=list)
    attendee_subtotal: Decimal = ZERO


class DraftDocument(WireModel):
    """The stored draft document"""

    function_id: str | None = None
    ticket_selections: dict[str, WireAttendeeTickets] = Field(default_factory=dict)
    function_metadata: FunctionMetadata | None = None
    ticket_metadata: dict[str, TicketMetadata] | None = None
    package_metadata: dict[str, PackageMetadata] | None = None
    attendee_selections: dict[str, PricedAttendeeSelection] | None = None
    order_summary: OrderSummary | None = None
    lodge_bulk_selection: LodgeBulkSelection | None = None
    registration_type: RegistrationMode | None = None

    @field_validator("registration_type", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> RegistrationMode | None:
        if value is None or value == "":
            return None
        try:
            return RegistrationMode.parse(value)
        except InvalidRegistrationMode as e:
            raise ValueError(str(e)) from e

    @field_validator("ticket_selections", mode="before")
    @classmethod
    def _upgrade_legacy_entries(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        upgraded: dict[str, Any] = {}
        for attendee_id, entry in value.items():
            if isinstance(entry, Mapping) and ("ticketDefinitionId" in entry or "selectedEvents" in entry):
                legacy = LegacySelection.model_validate({**entry, "shape": "legacy"})
                entry = legacy_to_attendee_selection(legacy).to_wire(
                    exclude={
                        "packages": {"__all__": {"unit_price"}},
                        "individual_tickets": {"__all__": {"unit_price"}},
                    }
                )
            upgraded[attendee_id] = entry
        return upgraded


# ============================================================================
# Projections
# ============================================================================


def _wire_tickets(selection: AttendeeSelection) -> WireAttendeeTickets:
    return WireAttendeeTickets(
        packages=[
            WirePackageSelection(package_id=p.package_id, quantity=p.quantity, tickets=p.tickets)
            for p in selection.packages
        ],
        individual_tickets=[
            WireTicketSelection(ticket_id=t.ticket_id, quantity=t.quantity)
            for t in selection.individual_tickets
        ],
    )


def ticket_selections_view(state: SelectionState) -> dict[str, dict[str, Any]]:
    """
    Project attendee selections into the unpriced ticketSelections shape

    Example:
        {"att-1": {"packages": [{"packageId": "pkg_789", "quantity": 1,
                   "tickets": [{"ticketId": "et_123", "quantity": 1}]}],
                   "individualTickets": []}}
    """
    return {
        attendee_id: _wire_tickets(selection).to_wire()
        for attendee_id, selection in state.attendee_selections.items()
    }


def priced_selections_view(state: SelectionState) -> dict[str, PricedAttendeeSelection]:
    """Project attendee selections into the priced attendeeSelections shape"""
    return {
        attendee_id: PricedAttendeeSelection(
            attendee_id=attendee_id,
            packages=[
                PricedPackage(
                    package_id=p.package_id,
                    quantity=p.quantity,
                    tickets=p.tickets,
                    unit_price=quantize_money(p.unit_price),
                    subtotal=p.subtotal(),
                )
                for p in selection.packages
            ],
            individual_tickets=[
                PricedTicket(
                    ticket_id=t.ticket_id,
                    quantity=t.quantity,
                    unit_price=quantize_money(t.unit_price),
                    subtotal=t.subtotal(),
                )
                for t in selection.individual_tickets
            ],
            attendee_subtotal=compute_attendee_subtotal(selection),
        )
        for attendee_id, selection in state.attendee_selections.items()
    }


def build_ticket_selection_payload(state: SelectionState) -> dict[str, Any]:
    """Aggregate every attendee's selections into one {packages, individualTickets} payload"""
    combined = WireAttendeeTickets()
    for selection in state.attendee_selections.values():
        wire = _wire_tickets(selection)
        combined.packages.extend(wire.packages)
        combined.individual_tickets.extend(wire.individual_tickets)
    return combined.to_wire()


# ============================================================================
# Encode / decode
# ============================================================================


def build_document(
    state: SelectionState,
    *,
    summary: OrderSummary | None = None,
    function_metadata: FunctionMetadata | None = None,
    ticket_metadata: Mapping[str, TicketMetadata] | None = None,
    package_metadata: Mapping[str, PackageMetadata] | None = None,
) -> DraftDocument:
    """Build the draft document for a state (summary recomputed when not given)"""
    if summary is None:
        summary = compute_order_summary(state.registration_type, state)
    return DraftDocument(
        function_id=state.function_id,
        ticket_selections={
            attendee_id: _wire_tickets(selection)
            for attendee_id, selection in state.attendee_selections.items()
        },
        function_metadata=function_metadata,
        ticket_metadata=dict(ticket_metadata) if ticket_metadata is not None else None,
        package_metadata=dict(package_metadata) if package_metadata is not None else None,
        attendee_selections=priced_selections_view(state),
        order_summary=summary,
        lodge_bulk_selection=state.lodge_bulk_selection,
        registration_type=state.registration_type,
    )


def serialize_state(
    state: SelectionState,
    *,
    summary: OrderSummary | None = None,
    function_metadata: FunctionMetadata | None = None,
    ticket_metadata: Mapping[str, TicketMetadata] | None = None,
    package_metadata: Mapping[str, PackageMetadata] | None = None,
) -> dict[str, Any]:
    """
    Encode a state as the camelCase draft document

    Args:
        state: Selection state to save
        summary: Order summary to store (recomputed from state when None)
        function_metadata/ticket_metadata/package_metadata: Captured snapshots

    Returns:
        JSON-compatible dict with money as decimal strings
    """
    document = build_document(
        state,
        summary=summary,
        function_metadata=function_metadata,
        ticket_metadata=ticket_metadata,
        package_metadata=package_metadata,
    )
    return document.to_wire()


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors()[:5]:
        location = ".".join(str(p) for p in error["loc"])
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_document(
    raw: Mapping[str, Any] | str | bytes, draft_id: str | None = None
) -> DraftDocument:
    """
    Decode and validate a stored draft document

    Args:
        raw: Decoded JSON mapping or the JSON text itself
        draft_id: Draft the document belongs to (for error reporting)

    Returns:
        Validated DraftDocument

    Raises:
        DraftDecodeError: If the document does not fit the schema
    """
    try:
        if isinstance(raw, (str, bytes)):
            return DraftDocument.model_validate_json(raw)
        return DraftDocument.model_validate(raw)
    except ValidationError as e:
        raise DraftDecodeError(_describe_validation_error(e), draft_id=draft_id) from e
    except (TypeError, ValueError) as e:
        raise DraftDecodeError(str(e), draft_id=draft_id) from e


def restore_state(
    document: DraftDocument,
    catalog: Catalog | None = None,
    draft_id: str | None = None,
) -> SelectionState:
    """
    Rebuild a SelectionState from a decoded document

    Captured prices are read from attendeeSelections. An entry missing
    there is priced from the catalog when one is supplied.

    Raises:
        DraftDecodeError: If an entry has no captured price and no catalog
            entry to fall back on
    """
    priced = document.attendee_selections or {}
    selections: dict[str, AttendeeSelection] = {}

    for attendee_id, wire in document.ticket_selections.items():
        priced_entry = priced.get(attendee_id)
        package_prices = {p.package_id: p.unit_price for p in priced_entry.packages} if priced_entry else {}
        ticket_prices = (
            {t.ticket_id: t.unit_price for t in priced_entry.individual_tickets} if priced_entry else {}
        )

        packages = []
        for package in wire.packages:
            unit_price = package_prices.get(package.package_id)
            if unit_price is None:
                unit_price = _catalog_price(catalog, "package", package.package_id, attendee_id, draft_id)
            packages.append(
                PackageSelection(
                    package_id=package.package_id,
                    quantity=package.quantity,
                    tickets=package.tickets,
                    unit_price=unit_price,
                )
            )

        tickets = []
        for ticket in wire.individual_tickets:
            unit_price = ticket_prices.get(ticket.ticket_id)
            if unit_price is None:
                unit_price = _catalog_price(catalog, "ticket", ticket.ticket_id, attendee_id, draft_id)
            tickets.append(
                TicketSelectionItem(ticket_id=ticket.ticket_id, quantity=ticket.quantity, unit_price=unit_price)
            )

        selections[attendee_id] = AttendeeSelection(packages=packages, individual_tickets=tickets)

    mode = document.registration_type
    if mode is None and document.lodge_bulk_selection is not None:
        mode = RegistrationMode.LODGE

    state = SelectionState(
        function_id=document.function_id,
        registration_type=mode,
        attendee_selections=selections,
        lodge_bulk_selection=document.lodge_bulk_selection,
    )

    if document.order_summary is not None:
        recomputed = compute_order_summary(mode, state)
        if recomputed != document.order_summary.model_copy(update={"registration_type": mode}):
            logger.warning(
                "Stored order summary differs from recomputed totals",
                draft_id=draft_id,
                stored_subtotal=str(document.order_summary.subtotal),
                recomputed_subtotal=str(recomputed.subtotal),
            )
    return state


def _catalog_price(
    catalog: Catalog | None, kind: str, item_id: str, attendee_id: str, draft_id: str | None
) -> Decimal:
    definition = None
    if catalog is not None:
        definition = catalog.get_package(item_id) if kind == "package" else catalog.get_ticket(item_id)
    if definition is None:
        raise DraftDecodeError(
            f"No captured price for {kind} {item_id} of attendee {attendee_id}",
            draft_id=draft_id,
        )
    return quantize_money(definition.price)
