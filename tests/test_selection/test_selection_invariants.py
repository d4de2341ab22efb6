"""
Tests for selection invariants and reporting validation

Payload messages are shown verbatim next to form fields, so the exact
wording is asserted.
"""

from decimal import Decimal

import pytest

from lodgetix_registration.catalog.models import PackageDefinition, TicketDefinition
from lodgetix_registration.kernel.errors import InvalidQuantity, NegativePrice
from lodgetix_registration.selection.invariants import (
    check_eligibility,
    find_duplicate_ticket_selections,
    validate_price,
    validate_quantity,
    validate_ticket_selection_payload,
)
from lodgetix_registration.selection.models import RegistrationMode, TicketQuantity

from tests.helpers import attendee, package_entry, ticket_entry


# Raising invariants


def test_validate_quantity() -> None:
    validate_quantity("et_123", 1)
    validate_quantity("et_123", 40)

    for bad in (0, -3, False, "2", 2.0, None):
        with pytest.raises(InvalidQuantity):
            validate_quantity("et_123", bad)


def test_validate_price() -> None:
    validate_price("et_123", Decimal("0"))

    with pytest.raises(NegativePrice):
        validate_price("et_123", Decimal("-0.01"))


# Payload validation


def test_valid_payload() -> None:
    payload = {
        "packages": [{"packageId": "pkg_789", "quantity": 1, "tickets": []}],
        "individualTickets": [{"ticketId": "et_123", "quantity": 2}],
    }

    result = validate_ticket_selection_payload(payload)

    assert result.is_valid
    assert result.errors == []


def test_payload_must_be_object() -> None:
    result = validate_ticket_selection_payload(["not", "an", "object"])
    assert result.errors == ["Payload must be an object"]


def test_payload_arrays_required() -> None:
    result = validate_ticket_selection_payload({"packages": "pkg_789"})

    assert not result.is_valid
    assert result.errors == ["packages must be an array", "individualTickets must be an array"]


def test_payload_entry_messages() -> None:
    payload = {
        "packages": [
            {"packageId": "pkg_789", "quantity": 1, "tickets": []},
            {"quantity": 0},
        ],
        "individualTickets": [{"ticketId": "", "quantity": -1}],
    }

    result = validate_ticket_selection_payload(payload)

    assert result.errors == [
        "Package 1 missing packageId",
        "Package 1 quantity must be a positive number",
        "Package 1 tickets must be an array",
        "Individual ticket 0 missing ticketId",
        "Individual ticket 0 quantity must be a positive number",
    ]


@pytest.mark.parametrize("quantity", [1.5, 2.5, 1.0, "2", True])
def test_payload_quantities_must_be_whole_numbers(quantity: object) -> None:
    payload = {
        "packages": [{"packageId": "pkg_789", "quantity": quantity, "tickets": []}],
        "individualTickets": [{"ticketId": "et_123", "quantity": quantity}],
    }

    result = validate_ticket_selection_payload(payload)

    assert not result.is_valid
    assert result.errors == [
        "Package 0 quantity must be a positive number",
        "Individual ticket 0 quantity must be a positive number",
    ]


# Duplicates


def test_find_duplicate_ticket_selections() -> None:
    selection = attendee(
        packages=[package_entry("pkg_duo", "190.00", tickets={"et_123": 1, "et_200": 1})],
        tickets=[
            ticket_entry("et_300", "45.00"),
            ticket_entry("et_200", "50.00"),
            ticket_entry("et_123", "150.00"),
        ],
    )

    assert find_duplicate_ticket_selections(selection) == ["et_200", "et_123"]


def test_no_duplicates_without_packages() -> None:
    selection = attendee(tickets=[ticket_entry("et_123", "150.00")])
    assert find_duplicate_ticket_selections(selection) == []


def test_package_provenance_is_collapsed() -> None:
    entry = package_entry("pkg_duo", "190.00", quantity=2, tickets={"et_123": 2, "et_200": 2})
    assert entry.tickets[0] == TicketQuantity(ticket_id="et_123", quantity=2)
    assert entry.ticket_count() == 4


# Eligibility


def test_ticket_attendee_type_eligibility(ceremony: TicketDefinition) -> None:
    assert check_eligibility(ceremony, attendee_type="Mason") == []
    assert check_eligibility(ceremony, attendee_type="guest") == [
        "Installation Ceremony is not available to guest attendees"
    ]
    assert check_eligibility(ceremony) == []


def test_package_registration_type_eligibility(lodge_table: PackageDefinition) -> None:
    assert check_eligibility(lodge_table, registration_type=RegistrationMode.LODGE) == []
    assert check_eligibility(lodge_table, registration_type=RegistrationMode.INDIVIDUALS) == [
        "Lodge Table Package is not available for individuals registrations"
    ]


def test_unrestricted_definitions(weekend_package: PackageDefinition) -> None:
    assert check_eligibility(
        weekend_package, attendee_type="guest", registration_type=RegistrationMode.DELEGATION
    ) == []
