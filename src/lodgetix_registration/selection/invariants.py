"""
Selection Invariants - Pure checks on selections and payloads

Two kinds of checks live here:

1. Invariants that raise: quantities and captured prices that no
   computation can resolve (InvalidQuantity, NegativePrice) and packages
   that cannot be expanded (EmptyPackageIncludes).
2. Validation that reports: payload structure, duplicate tickets and
   eligibility problems come back as message lists for the wizard to
   show next to the offending field. Nothing in this group raises.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from lodgetix_registration.catalog.models import PackageDefinition, TicketDefinition
from lodgetix_registration.kernel.errors import (
    EmptyPackageIncludes,
    InvalidQuantity,
    NegativePrice,
)
from lodgetix_registration.selection.models import AttendeeSelection, RegistrationMode


def validate_quantity(item_id: str, quantity: Any) -> None:
    """
    Ensure a selection quantity is a positive integer

    Raises:
        InvalidQuantity: If quantity is not an int >= 1 (bools rejected)
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(item_id, quantity)


def validate_price(item_id: str, price: Decimal) -> None:
    """
    Ensure a captured unit price is not negative

    Raises:
        NegativePrice: If price < 0
    """
    if price < 0:
        raise NegativePrice(item_id, price)


def validate_package_includes(package: PackageDefinition) -> None:
    """
    Ensure a package can be expanded into tickets

    Raises:
        EmptyPackageIncludes: If the package includes no tickets
    """
    if not package.included_ticket_ids:
        raise EmptyPackageIncludes(package.package_id)


# ============================================================================
# Reporting validation
# ============================================================================


class ValidationResult(BaseModel):
    """Outcome of a reporting validation"""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=errors)


def _is_positive_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int) and value >= 1


def validate_ticket_selection_payload(payload: Any) -> ValidationResult:
    """
    Check the structure of a ticket selection payload

    The payload is the wire form of one attendee's selections:
    {"packages": [...], "individualTickets": [...]}.

    Args:
        payload: Decoded JSON value

    Returns:
        ValidationResult with one message per problem found

    Example:
        >>> validate_ticket_selection_payload({"packages": [{"quantity": 0}], "individualTickets": []}).errors
        ['Package 0 missing packageId', 'Package 0 quantity must be a positive number', 'Package 0 tickets must be an array']
    """
    if not isinstance(payload, Mapping):
        return ValidationResult.from_errors(["Payload must be an object"])

    errors: list[str] = []
    packages = payload.get("packages")
    individual_tickets = payload.get("individualTickets")

    if not isinstance(packages, list):
        errors.append("packages must be an array")
        packages = []
    if not isinstance(individual_tickets, list):
        errors.append("individualTickets must be an array")
        individual_tickets = []

    for index, package in enumerate(packages):
        package = package if isinstance(package, Mapping) else {}
        if not package.get("packageId"):
            errors.append(f"Package {index} missing packageId")
        if not _is_positive_integer(package.get("quantity")):
            errors.append(f"Package {index} quantity must be a positive number")
        if not isinstance(package.get("tickets"), list):
            errors.append(f"Package {index} tickets must be an array")

    for index, ticket in enumerate(individual_tickets):
        ticket = ticket if isinstance(ticket, Mapping) else {}
        if not ticket.get("ticketId"):
            errors.append(f"Individual ticket {index} missing ticketId")
        if not _is_positive_integer(ticket.get("quantity")):
            errors.append(f"Individual ticket {index} quantity must be a positive number")

    return ValidationResult.from_errors(errors)


def find_duplicate_ticket_selections(selection: AttendeeSelection) -> list[str]:
    """
    Find tickets selected both inside a package and individually

    The ledger does not deduplicate across the two arrays; the wizard
    shows these as warnings before payment.

    Returns:
        Ticket ids in first-seen order of the individual tickets
    """
    packaged = {t.ticket_id for p in selection.packages for t in p.tickets}
    duplicates: list[str] = []
    for ticket in selection.individual_tickets:
        if ticket.ticket_id in packaged and ticket.ticket_id not in duplicates:
            duplicates.append(ticket.ticket_id)
    return duplicates


def check_eligibility(
    definition: TicketDefinition | PackageDefinition,
    attendee_type: str | None = None,
    registration_type: RegistrationMode | None = None,
) -> list[str]:
    """
    Check a ticket or package against its eligibility allow-lists

    An empty allow-list means unrestricted. Attendee types compare
    case-insensitively ("Mason" and "mason" are the same type).

    Returns:
        Messages describing why the definition is not eligible (empty if eligible)
    """
    problems: list[str] = []
    name = definition.name

    allowed_attendees = {t.lower() for t in definition.eligible_attendee_types}
    if allowed_attendees and attendee_type is not None:
        if attendee_type.lower() not in allowed_attendees:
            problems.append(f"{name} is not available to {attendee_type} attendees")

    if isinstance(definition, PackageDefinition) and registration_type is not None:
        allowed_modes = set()
        for value in definition.eligible_registration_types:
            allowed_modes.add(RegistrationMode.parse(value))
        if allowed_modes and registration_type not in allowed_modes:
            problems.append(
                f"{name} is not available for {registration_type.value} registrations"
            )

    return problems
