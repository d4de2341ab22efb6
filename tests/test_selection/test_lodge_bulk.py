"""
Tests for lodge bulk selections
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from lodgetix_registration.catalog.models import PackageDefinition
from lodgetix_registration.kernel.errors import EmptyPackageIncludes, InvalidQuantity, ModeMismatch
from lodgetix_registration.selection.lodge import (
    build_lodge_bulk_selection,
    clear_lodge_bulk_selection,
    set_lodge_bulk_selection,
)
from lodgetix_registration.selection.models import SelectionState


def test_two_tables_of_ten(lodge_table: PackageDefinition) -> None:
    """2 x $1950 tables of 10 seats = 20 tickets for $3,900"""
    bulk = build_lodge_bulk_selection(lodge_table, 2)

    assert bulk.package_id == "pkg_table"
    assert bulk.quantity == 2
    assert bulk.items_per_package == 10
    assert bulk.will_generate_tickets == 20
    assert bulk.unit_price == Decimal("1950.00")
    assert bulk.subtotal == Decimal("3900.00")


def test_items_per_package_falls_back_to_includes(dinner_and_ceremony: PackageDefinition) -> None:
    bulk = build_lodge_bulk_selection(dinner_and_ceremony, 3)

    assert bulk.items_per_package == 2
    assert bulk.will_generate_tickets == 6
    assert bulk.subtotal == Decimal("570.00")


def test_bulk_rejects_zero_quantity(lodge_table: PackageDefinition) -> None:
    with pytest.raises(InvalidQuantity):
        build_lodge_bulk_selection(lodge_table, 0)


def test_bulk_rejects_package_without_seats() -> None:
    empty = PackageDefinition(package_id="pkg_empty", name="Empty", price=Decimal("100.00"))
    with pytest.raises(EmptyPackageIncludes):
        build_lodge_bulk_selection(empty, 1)


def test_set_bulk_requires_lodge_mode(
    individuals_state: SelectionState, lodge_table: PackageDefinition
) -> None:
    with pytest.raises(ModeMismatch) as exc_info:
        set_lodge_bulk_selection(individuals_state, lodge_table, 1)

    assert exc_info.value.current_mode == "individuals"


def test_set_bulk_replaces_previous(
    lodge_state: SelectionState,
    lodge_table: PackageDefinition,
    weekend_package: PackageDefinition,
) -> None:
    selected_at = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    first = set_lodge_bulk_selection(lodge_state, lodge_table, 2, selected_at)
    second = set_lodge_bulk_selection(first, weekend_package, 5)

    assert first.lodge_bulk_selection is not None
    assert first.lodge_bulk_selection.selection_timestamp == selected_at
    assert second.lodge_bulk_selection is not None
    assert second.lodge_bulk_selection.package_id == "pkg_789"
    assert second.lodge_bulk_selection.will_generate_tickets == 5
    assert lodge_state.lodge_bulk_selection is None


def test_clear_bulk(lodge_state: SelectionState, lodge_table: PackageDefinition) -> None:
    state = set_lodge_bulk_selection(lodge_state, lodge_table, 1)

    cleared = clear_lodge_bulk_selection(state)

    assert cleared.lodge_bulk_selection is None
    assert clear_lodge_bulk_selection(cleared) == cleared
