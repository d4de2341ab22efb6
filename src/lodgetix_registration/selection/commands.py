"""
Selection Commands - Intentions to change selection state

Commands are what the wizard asks for. The ledger resolves catalog ids
against the captured Catalog and reduces each command into a new
SelectionState.
"""

from typing import Any

from pydantic import BaseModel, field_validator

from lodgetix_registration.selection.models import RegistrationMode, SelectionKind


class AddPackageSelection(BaseModel):
    """
    Select a package for an attendee

    Selecting the same package again replaces the entry (quantity is
    updated, never duplicated).
    """

    attendee_id: str
    package_id: str
    quantity: int = 1


class AddIndividualTicket(BaseModel):
    """Select an individual ticket for an attendee (replace-not-duplicate by ticket id)"""

    attendee_id: str
    ticket_id: str
    quantity: int = 1


class RemoveSelection(BaseModel):
    """Remove one package or ticket entry from an attendee (no-op if absent)"""

    attendee_id: str
    kind: SelectionKind
    item_id: str


class ClearAttendee(BaseModel):
    """Empty both selection arrays of an attendee"""

    attendee_id: str


class RemoveAttendee(BaseModel):
    """Drop an attendee's selections entirely (the attendee left the registration)"""

    attendee_id: str


class SetLodgeBulkSelection(BaseModel):
    """
    Choose the lodge's bulk package and quantity

    Only valid for lodge registrations. Replaces any previous bulk selection.
    """

    package_id: str
    quantity: int


class ClearLodgeBulkSelection(BaseModel):
    """Remove the lodge's bulk selection"""

    pass


class SwitchRegistrationMode(BaseModel):
    """
    Change the registration type

    Switching to lodge drops attendee selections; switching away from
    lodge drops the bulk selection. Switching between individuals and
    delegation keeps attendee selections.
    """

    registration_type: RegistrationMode

    @field_validator("registration_type", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> RegistrationMode:
        return RegistrationMode.parse(value)


class ClearRegistration(BaseModel):
    """Reset all selections and the registration type, keeping the function"""

    pass


SELECTION_COMMAND_TYPES = {
    "AddPackageSelection": AddPackageSelection,
    "AddIndividualTicket": AddIndividualTicket,
    "RemoveSelection": RemoveSelection,
    "ClearAttendee": ClearAttendee,
    "RemoveAttendee": RemoveAttendee,
    "SetLodgeBulkSelection": SetLodgeBulkSelection,
    "ClearLodgeBulkSelection": ClearLodgeBulkSelection,
    "SwitchRegistrationMode": SwitchRegistrationMode,
    "ClearRegistration": ClearRegistration,
}

SelectionCommand = (
    AddPackageSelection
    | AddIndividualTicket
    | RemoveSelection
    | ClearAttendee
    | RemoveAttendee
    | SetLodgeBulkSelection
    | ClearLodgeBulkSelection
    | SwitchRegistrationMode
    | ClearRegistration
)
