"""
Selection Domain Models - What an operator has chosen to buy

Selections are recorded per attendee (individuals and delegation
registrations) or as one bulk block for the whole lodge (lodge
registrations). Every entry carries the unit price captured when it was
selected, so totals never depend on a later catalog lookup.

Key concepts:
- RegistrationMode: individuals, lodge or delegation
- AttendeeSelection: packages and individual tickets for one attendee
- LodgeBulkSelection: N copies of one package bought before attendees exist
- SelectionState: the owned state object every ledger reducer returns
- LegacySelection / EnhancedSelection: the two historical selection shapes
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import Field, model_validator

from lodgetix_registration.kernel.errors import InvalidRegistrationMode
from lodgetix_registration.kernel.money import ZERO, quantize_money
from lodgetix_registration.kernel.wire import WireModel


class RegistrationMode(str, Enum):
    """
    Registration type chosen at the start of the wizard

    - INDIVIDUALS: attendees registered one by one, each with their own selections
    - LODGE: a lodge buys a block of packages; attendees are named later
    - DELEGATION: a grand lodge delegation, selections per attendee
    """

    INDIVIDUALS = "individuals"
    LODGE = "lodge"
    DELEGATION = "delegation"

    @property
    def uses_attendee_selections(self) -> bool:
        """True for modes that record selections per attendee"""
        return self is not RegistrationMode.LODGE

    @classmethod
    def parse(cls, value: "str | RegistrationMode") -> "RegistrationMode":
        """
        Parse a registration type, accepting historical spellings

        Raises:
            InvalidRegistrationMode: If the value is not recognised
        """
        if isinstance(value, RegistrationMode):
            return value
        normalized = str(value).strip().lower()
        normalized = _MODE_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidRegistrationMode(str(value)) from None


# Older drafts stored the singular and plural spellings
_MODE_ALIASES = {
    "individual": "individuals",
    "lodges": "lodge",
    "delegations": "delegation",
}


class SelectionKind(str, Enum):
    """Which array of an attendee selection an entry lives in"""

    PACKAGE = "package"
    TICKET = "ticket"


class TicketQuantity(WireModel):
    """A ticket id with a quantity - the provenance entry of a package selection"""

    ticket_id: str
    quantity: int = Field(default=1, ge=1)


class TicketSelectionItem(WireModel):
    """An individually selected ticket with its captured unit price"""

    ticket_id: str
    quantity: int = 1
    unit_price: Decimal = ZERO

    def subtotal(self) -> Decimal:
        return quantize_money(self.unit_price * self.quantity)


class PackageSelection(WireModel):
    """
    A selected package with its captured unit price

    tickets is a provenance copy of the package's included tickets at
    selection time, aggregated per ticket id. It is never used for pricing.
    """

    package_id: str
    quantity: int = 1
    tickets: list[TicketQuantity] = Field(default_factory=list)
    unit_price: Decimal = ZERO

    def subtotal(self) -> Decimal:
        return quantize_money(self.unit_price * self.quantity)

    def ticket_count(self) -> int:
        """Tickets this entry delivers (package quantity x tickets per package)"""
        return sum(t.quantity for t in self.tickets)


class AttendeeSelection(WireModel):
    """Packages and individual tickets chosen for one attendee"""

    packages: list[PackageSelection] = Field(default_factory=list)
    individual_tickets: list[TicketSelectionItem] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.packages and not self.individual_tickets

    def find_package(self, package_id: str) -> PackageSelection | None:
        return next((p for p in self.packages if p.package_id == package_id), None)

    def find_ticket(self, ticket_id: str) -> TicketSelectionItem | None:
        return next(
            (t for t in self.individual_tickets if t.ticket_id == ticket_id), None
        )


class TicketLineItem(WireModel):
    """
    One expanded ticket instance

    A package bought N times yields N line items per included ticket, each
    with quantity 1 and its own ticket_record_id.
    """

    attendee_id: str
    ticket_id: str
    package_id: str | None = None
    quantity: int = 1
    ticket_record_id: str


class LodgeBulkSelection(WireModel):
    """
    A lodge's block purchase of one package type

    Invariants (maintained by the lodge ledger, checked on load):
    - will_generate_tickets == quantity * items_per_package
    - subtotal == quantity * unit_price
    """

    package_id: str
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)
    items_per_package: int = Field(ge=1)
    subtotal: Decimal
    will_generate_tickets: int
    selection_timestamp: datetime | None = None

    @model_validator(mode="after")
    def _check_derived_totals(self) -> "LodgeBulkSelection":
        expected_tickets = self.quantity * self.items_per_package
        if self.will_generate_tickets != expected_tickets:
            raise ValueError(
                f"Lodge bulk selection of {self.package_id} generates {expected_tickets} tickets, "
                f"not {self.will_generate_tickets}"
            )
        expected_subtotal = quantize_money(self.unit_price * self.quantity)
        if self.subtotal != expected_subtotal:
            raise ValueError(
                f"Lodge bulk selection of {self.package_id} costs {expected_subtotal}, not {self.subtotal}"
            )
        return self


class SelectionState(WireModel):
    """
    The owned selection state of one registration

    Attendee selections and the lodge bulk selection are mutually
    exclusive: a lodge registration holds only the bulk selection, the
    other modes hold only attendee selections.
    """

    function_id: str | None = None
    registration_type: RegistrationMode | None = None
    attendee_selections: dict[str, AttendeeSelection] = Field(default_factory=dict)
    lodge_bulk_selection: LodgeBulkSelection | None = None


# ============================================================================
# Historical selection shapes
# ============================================================================


class LegacySelection(WireModel):
    """
    The original one-package-per-attendee shape

    ticket_definition_id names the chosen package (None when only events
    were picked); selected_events lists the chosen ticket ids.
    """

    shape: Literal["legacy"] = "legacy"
    ticket_definition_id: str | None = None
    selected_events: list[str] = Field(default_factory=list)


class EnhancedSelection(AttendeeSelection):
    """The packages / individualTickets shape with quantities"""

    shape: Literal["enhanced"] = "enhanced"


AnySelection = Annotated[
    Union[LegacySelection, EnhancedSelection], Field(discriminator="shape")
]
