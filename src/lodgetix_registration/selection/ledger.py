"""
Selection Ledger - Reducers over SelectionState

Every function here takes a SelectionState and returns a new one. The
input state is never mutated, so a caller holding the previous state
(an undo stack, a codec snapshot) keeps seeing exactly what it had.

Rules enforced:
- Selecting a package or ticket that is already selected replaces the
  entry (quantity updated, position kept), never duplicates it
- Removing something that is not there is a no-op
- Attendee selections exist only in individuals/delegation registrations,
  the bulk selection only in lodge registrations
"""

import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

from lodgetix_registration.catalog.models import Catalog, PackageDefinition, TicketDefinition
from lodgetix_registration.kernel.errors import ModeMismatch
from lodgetix_registration.kernel.ids import IdFactory
from lodgetix_registration.kernel.logging import get_logger
from lodgetix_registration.kernel.metrics import (
    selection_command_duration_seconds,
    selection_commands_total,
)
from lodgetix_registration.kernel.money import quantize_money
from lodgetix_registration.kernel.time import TimeProvider
from lodgetix_registration.selection.commands import (
    AddIndividualTicket,
    AddPackageSelection,
    ClearAttendee,
    ClearLodgeBulkSelection,
    ClearRegistration,
    RemoveAttendee,
    RemoveSelection,
    SelectionCommand,
    SetLodgeBulkSelection,
    SwitchRegistrationMode,
)
from lodgetix_registration.selection.expansion import collapse_line_items, expand
from lodgetix_registration.selection.invariants import validate_price, validate_quantity
from lodgetix_registration.selection.lodge import (
    clear_lodge_bulk_selection,
    set_lodge_bulk_selection,
)
from lodgetix_registration.selection.models import (
    AttendeeSelection,
    PackageSelection,
    RegistrationMode,
    SelectionKind,
    SelectionState,
    TicketSelectionItem,
)

logger = get_logger(__name__)


def _require_attendee_mode(state: SelectionState, operation: str) -> None:
    mode = state.registration_type
    if mode is None or not mode.uses_attendee_selections:
        raise ModeMismatch(operation, mode.value if mode else None)


def add_package_selection(
    state: SelectionState,
    attendee_id: str,
    package: PackageDefinition,
    quantity: int = 1,
    id_factory: IdFactory | None = None,
) -> SelectionState:
    """
    Select a package for an attendee

    The package is expanded to record which tickets it delivers, and the
    entry is priced at the package's own captured price.

    Args:
        state: Current selection state
        attendee_id: Attendee receiving the package
        package: Captured package definition
        quantity: Copies of the package
        id_factory: Source of ticket record ids for the expansion

    Returns:
        New state with the package entry upserted

    Raises:
        ModeMismatch: If the registration does not record attendee selections
        EmptyPackageIncludes: If the package includes no tickets
        InvalidQuantity: If quantity < 1
        NegativePrice: If the package price is negative
    """
    _require_attendee_mode(state, "add_package_selection")
    validate_price(package.package_id, package.price)
    line_items = expand(package, attendee_id, quantity, id_factory)

    entry = PackageSelection(
        package_id=package.package_id,
        quantity=quantity,
        tickets=collapse_line_items(line_items),
        unit_price=quantize_money(package.price),
    )

    new_state = state.model_copy(deep=True)
    selection = new_state.attendee_selections.setdefault(attendee_id, AttendeeSelection())
    for index, existing in enumerate(selection.packages):
        if existing.package_id == entry.package_id:
            selection.packages[index] = entry
            break
    else:
        selection.packages.append(entry)
    return new_state


def add_individual_ticket(
    state: SelectionState,
    attendee_id: str,
    ticket: TicketDefinition,
    quantity: int = 1,
) -> SelectionState:
    """
    Select an individual ticket for an attendee

    Raises:
        ModeMismatch: If the registration does not record attendee selections
        InvalidQuantity: If quantity < 1
        NegativePrice: If the ticket price is negative
    """
    _require_attendee_mode(state, "add_individual_ticket")
    validate_quantity(ticket.ticket_id, quantity)
    validate_price(ticket.ticket_id, ticket.price)

    entry = TicketSelectionItem(
        ticket_id=ticket.ticket_id,
        quantity=quantity,
        unit_price=quantize_money(ticket.price),
    )

    new_state = state.model_copy(deep=True)
    selection = new_state.attendee_selections.setdefault(attendee_id, AttendeeSelection())
    for index, existing in enumerate(selection.individual_tickets):
        if existing.ticket_id == entry.ticket_id:
            selection.individual_tickets[index] = entry
            break
    else:
        selection.individual_tickets.append(entry)
    return new_state


def remove_selection(
    state: SelectionState,
    attendee_id: str,
    kind: SelectionKind,
    item_id: str,
) -> SelectionState:
    """Remove a package or ticket entry from an attendee (idempotent)"""
    new_state = state.model_copy(deep=True)
    selection = new_state.attendee_selections.get(attendee_id)
    if selection is None:
        return new_state

    if SelectionKind(kind) is SelectionKind.PACKAGE:
        selection.packages = [p for p in selection.packages if p.package_id != item_id]
    else:
        selection.individual_tickets = [
            t for t in selection.individual_tickets if t.ticket_id != item_id
        ]
    return new_state


def clear_attendee(state: SelectionState, attendee_id: str) -> SelectionState:
    """Empty both selection arrays of an attendee (no-op for unknown attendees)"""
    new_state = state.model_copy(deep=True)
    if attendee_id in new_state.attendee_selections:
        new_state.attendee_selections[attendee_id] = AttendeeSelection()
    return new_state


def remove_attendee(state: SelectionState, attendee_id: str) -> SelectionState:
    """Drop an attendee's selections entirely"""
    new_state = state.model_copy(deep=True)
    new_state.attendee_selections.pop(attendee_id, None)
    return new_state


def switch_registration_mode(
    state: SelectionState, registration_type: RegistrationMode | str
) -> SelectionState:
    """
    Change the registration type, dropping selections the new type cannot hold

    - to lodge: attendee selections are cleared
    - away from lodge: the bulk selection is cleared
    - individuals <-> delegation: attendee selections are kept
    - same type: no change
    """
    mode = RegistrationMode.parse(registration_type)
    new_state = state.model_copy(deep=True)
    if state.registration_type is mode:
        return new_state

    if mode is RegistrationMode.LODGE:
        new_state.attendee_selections = {}
    else:
        new_state.lodge_bulk_selection = None
    new_state.registration_type = mode
    return new_state


def clear_registration(state: SelectionState) -> SelectionState:
    """Reset selections and registration type, keeping the function"""
    return SelectionState(function_id=state.function_id)


# ============================================================================
# Command dispatch
# ============================================================================


class SelectionLedger:
    """
    Applies selection commands against a captured catalog

    Each command type maps to a reducer above. Catalog ids in commands are
    resolved here, so an unknown package or ticket surfaces as
    CatalogEntryNotFound before any state changes.
    """

    def __init__(
        self,
        catalog: Catalog,
        id_factory: IdFactory | None = None,
        time_provider: TimeProvider | None = None,
    ) -> None:
        self.catalog = catalog
        self.id_factory = id_factory
        self.time_provider = time_provider
        self._handlers: dict[type, Callable[[SelectionState, Any], SelectionState]] = {
            AddPackageSelection: self._apply_add_package,
            AddIndividualTicket: self._apply_add_ticket,
            RemoveSelection: self._apply_remove_selection,
            ClearAttendee: lambda s, c: clear_attendee(s, c.attendee_id),
            RemoveAttendee: lambda s, c: remove_attendee(s, c.attendee_id),
            SetLodgeBulkSelection: self._apply_set_lodge_bulk,
            ClearLodgeBulkSelection: lambda s, c: clear_lodge_bulk_selection(s),
            SwitchRegistrationMode: lambda s, c: switch_registration_mode(
                s, c.registration_type
            ),
            ClearRegistration: lambda s, c: clear_registration(s),
        }

    def apply(self, state: SelectionState, command: SelectionCommand) -> SelectionState:
        """
        Reduce one command into a new state

        Raises:
            TypeError: If the command type is not a selection command
            LodgetixError: Whatever the underlying reducer raises
        """
        command_type = type(command).__name__
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unsupported selection command: {command_type}")

        start = time.perf_counter()
        status = "success"
        try:
            new_state = handler(state, command)
        except Exception:
            status = "failure"
            raise
        finally:
            selection_command_duration_seconds.labels(command_type=command_type).observe(
                time.perf_counter() - start
            )
            selection_commands_total.labels(command_type=command_type, status=status).inc()

        logger.debug("Selection command applied", command_type=command_type)
        return new_state

    def _now(self) -> datetime | None:
        return self.time_provider.now() if self.time_provider else None

    def _apply_add_package(
        self, state: SelectionState, command: AddPackageSelection
    ) -> SelectionState:
        package = self.catalog.require_package(command.package_id)
        return add_package_selection(
            state, command.attendee_id, package, command.quantity, self.id_factory
        )

    def _apply_add_ticket(
        self, state: SelectionState, command: AddIndividualTicket
    ) -> SelectionState:
        ticket = self.catalog.require_ticket(command.ticket_id)
        return add_individual_ticket(state, command.attendee_id, ticket, command.quantity)

    def _apply_remove_selection(
        self, state: SelectionState, command: RemoveSelection
    ) -> SelectionState:
        return remove_selection(state, command.attendee_id, command.kind, command.item_id)

    def _apply_set_lodge_bulk(
        self, state: SelectionState, command: SetLodgeBulkSelection
    ) -> SelectionState:
        package = self.catalog.require_package(command.package_id)
        return set_lodge_bulk_selection(state, package, command.quantity, self._now())


def apply_command(
    state: SelectionState,
    command: SelectionCommand,
    catalog: Catalog,
    id_factory: IdFactory | None = None,
    time_provider: TimeProvider | None = None,
) -> SelectionState:
    """
    Reduce one selection command against a captured catalog

    Convenience wrapper around SelectionLedger for one-off commands.
    """
    return SelectionLedger(catalog, id_factory, time_provider).apply(state, command)
