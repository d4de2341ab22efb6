"""
Tests for package expansion into ticket line items
"""

from decimal import Decimal

import pytest

from lodgetix_registration.catalog.models import PackageDefinition
from lodgetix_registration.kernel.errors import EmptyPackageIncludes, InvalidQuantity
from lodgetix_registration.kernel.ids import SequentialIdFactory
from lodgetix_registration.selection.expansion import collapse_line_items, expand
from lodgetix_registration.selection.models import TicketQuantity


def test_expand_one_item_per_copy(
    dinner_and_ceremony: PackageDefinition, id_factory: SequentialIdFactory
) -> None:
    """2 included tickets x quantity 3 = 6 line items"""
    items = expand(dinner_and_ceremony, "att-1", quantity=3, id_factory=id_factory)

    assert len(items) == 6
    assert [i.ticket_id for i in items] == ["et_123"] * 3 + ["et_200"] * 3
    assert all(i.quantity == 1 for i in items)
    assert all(i.package_id == "pkg_duo" for i in items)
    assert all(i.attendee_id == "att-1" for i in items)
    assert [i.ticket_record_id for i in items] == [f"rec-{n}" for n in range(1, 7)]


def test_expand_default_ids_are_unique(dinner_and_ceremony: PackageDefinition) -> None:
    items = expand(dinner_and_ceremony, "att-1", quantity=5)
    assert len({i.ticket_record_id for i in items}) == 10


def test_expand_empty_package_raises() -> None:
    empty = PackageDefinition(
        package_id="pkg_empty", name="Misconfigured Package", price=Decimal("10.00")
    )

    with pytest.raises(EmptyPackageIncludes) as exc_info:
        expand(empty, "att-1")

    assert exc_info.value.package_id == "pkg_empty"


@pytest.mark.parametrize("quantity", [0, -1, True, 1.5])
def test_expand_rejects_invalid_quantity(
    weekend_package: PackageDefinition, quantity: object
) -> None:
    with pytest.raises(InvalidQuantity):
        expand(weekend_package, "att-1", quantity=quantity)  # type: ignore[arg-type]


def test_collapse_line_items(
    dinner_and_ceremony: PackageDefinition, id_factory: SequentialIdFactory
) -> None:
    items = expand(dinner_and_ceremony, "att-1", quantity=3, id_factory=id_factory)

    assert collapse_line_items(items) == [
        TicketQuantity(ticket_id="et_123", quantity=3),
        TicketQuantity(ticket_id="et_200", quantity=3),
    ]


def test_collapse_nothing() -> None:
    assert collapse_line_items([]) == []
