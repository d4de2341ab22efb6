"""
Tests for the legacy selection adapter

Conversion to the enhanced shape is total; the reverse direction reports
every fact it drops.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from lodgetix_registration.catalog.models import Catalog
from lodgetix_registration.kernel.money import ZERO
from lodgetix_registration.pricing.aggregator import find_zero_priced_items
from lodgetix_registration.selection.legacy import (
    legacy_packages_view,
    normalize_selection,
    parse_selection,
    summarize_as_legacy,
    to_enhanced,
)
from lodgetix_registration.selection.models import (
    EnhancedSelection,
    LegacySelection,
    RegistrationMode,
    SelectionState,
    TicketQuantity,
)

from tests.helpers import attendee, package_entry, ticket_entry

LEGACY_MAP = {
    "att-1": {"ticketDefinitionId": "pkg_789", "selectedEvents": ["et_123"]},
    "att-2": {"ticketDefinitionId": None, "selectedEvents": ["et_123", "et_200"]},
    "att-3": {"ticketDefinitionId": None, "selectedEvents": []},
}


# Shape detection


def test_parse_selection_detects_legacy() -> None:
    parsed = parse_selection({"ticketDefinitionId": "pkg_789", "selectedEvents": ["et_123"]})

    assert isinstance(parsed, LegacySelection)
    assert parsed.ticket_definition_id == "pkg_789"


def test_parse_selection_detects_enhanced() -> None:
    parsed = parse_selection(
        {
            "packages": [{"packageId": "pkg_789", "quantity": 2, "tickets": []}],
            "individualTickets": [],
        }
    )

    assert isinstance(parsed, EnhancedSelection)
    assert parsed.packages[0].quantity == 2


def test_parse_selection_trusts_explicit_shape() -> None:
    parsed = parse_selection({"shape": "enhanced", "individualTickets": [{"ticketId": "et_123"}]})
    assert isinstance(parsed, EnhancedSelection)

    with pytest.raises(ValidationError):
        parse_selection({"shape": "classic"})


# Legacy to enhanced


def test_to_enhanced_with_catalog(catalog: Catalog) -> None:
    enhanced = to_enhanced(LEGACY_MAP, catalog)

    assert set(enhanced) == {"att-1", "att-2", "att-3"}

    package = enhanced["att-1"].packages[0]
    assert package.package_id == "pkg_789"
    assert package.quantity == 1
    assert package.tickets == [TicketQuantity(ticket_id="et_123", quantity=1)]
    assert package.unit_price == Decimal("180.00")
    assert enhanced["att-1"].individual_tickets == []

    tickets = enhanced["att-2"].individual_tickets
    assert [(t.ticket_id, t.quantity, t.unit_price) for t in tickets] == [
        ("et_123", 1, Decimal("150.00")),
        ("et_200", 1, Decimal("50.00")),
    ]
    assert enhanced["att-2"].packages == []

    assert enhanced["att-3"].is_empty()


def test_to_enhanced_without_catalog_leaves_zero_prices() -> None:
    enhanced = to_enhanced(LEGACY_MAP)
    state = SelectionState(
        registration_type=RegistrationMode.INDIVIDUALS, attendee_selections=enhanced
    )

    assert enhanced["att-1"].packages[0].unit_price == ZERO
    unpriced = find_zero_priced_items(state)
    assert [(i.attendee_id, i.kind, i.item_id) for i in unpriced] == [
        ("att-1", "package", "pkg_789"),
        ("att-2", "ticket", "et_123"),
        ("att-2", "ticket", "et_200"),
    ]


def test_to_enhanced_accepts_models(catalog: Catalog) -> None:
    legacy = LegacySelection(ticket_definition_id=None, selected_events=["et_300"])
    enhanced = to_enhanced({"att-1": legacy}, catalog)
    assert enhanced["att-1"].individual_tickets[0].unit_price == Decimal("45.00")


def test_normalize_selection_reads_both_shapes(catalog: Catalog) -> None:
    from_legacy = normalize_selection(LEGACY_MAP["att-1"], catalog)
    from_enhanced = normalize_selection(
        {
            "packages": [
                {
                    "packageId": "pkg_789",
                    "quantity": 1,
                    "tickets": [{"ticketId": "et_123", "quantity": 1}],
                    "unitPrice": "180.00",
                }
            ],
            "individualTickets": [],
        }
    )

    assert from_legacy == from_enhanced


# Enhanced to legacy


def test_summarize_single_package_is_lossless() -> None:
    summary = summarize_as_legacy(
        attendee(packages=[package_entry("pkg_789", "180.00", tickets={"et_123": 1})])
    )

    assert summary.is_lossless
    assert summary.selection.ticket_definition_id == "pkg_789"
    assert summary.selection.selected_events == ["et_123"]


def test_summarize_reports_dropped_facts() -> None:
    selection = attendee(
        packages=[
            package_entry("pkg_789", "180.00", quantity=2, tickets={"et_123": 2}),
            package_entry("pkg_duo", "190.00", tickets={"et_123": 1, "et_200": 1}),
        ],
        tickets=[ticket_entry("et_300", "45.00")],
    )

    summary = summarize_as_legacy(selection)

    assert not summary.is_lossless
    assert summary.selection.ticket_definition_id == "pkg_789"
    assert summary.dropped == [
        "Package pkg_789 quantity 2 reduced to 1",
        "Additional package pkg_duo dropped",
        "Individual ticket et_300 beside package dropped",
    ]


def test_summarize_tickets_only() -> None:
    selection = attendee(
        tickets=[ticket_entry("et_123", "150.00"), ticket_entry("et_200", "50.00", quantity=3)]
    )

    summary = summarize_as_legacy(selection)

    assert summary.selection.ticket_definition_id is None
    assert summary.selection.selected_events == ["et_123", "et_200"]
    assert summary.dropped == ["Ticket et_200 quantity 3 reduced to 1"]


def test_legacy_packages_view() -> None:
    state = SelectionState(
        registration_type=RegistrationMode.INDIVIDUALS,
        attendee_selections={
            "att-1": attendee(packages=[package_entry("pkg_789", "180.00", tickets={"et_123": 1})]),
            "att-2": attendee(),
        },
    )

    view = legacy_packages_view(state)

    assert view["att-1"].selection.ticket_definition_id == "pkg_789"
    assert view["att-2"].selection.selected_events == []
    assert all(summary.is_lossless for summary in view.values())
