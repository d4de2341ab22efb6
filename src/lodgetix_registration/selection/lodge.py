"""
Lodge Bulk Ledger - Block purchases before attendees exist

A lodge registration buys N copies of one package (typically a table of
ten) without naming anyone. The bulk selection records how many seats
the purchase will generate and what it costs; attendees are attached to
the generated tickets after payment.

There is only ever one bulk selection per lodge registration. Choosing
a different package replaces it wholesale.
"""

from datetime import datetime

from lodgetix_registration.catalog.models import PackageDefinition
from lodgetix_registration.kernel.errors import EmptyPackageIncludes, ModeMismatch
from lodgetix_registration.kernel.money import quantize_money
from lodgetix_registration.selection.invariants import validate_price, validate_quantity
from lodgetix_registration.selection.models import (
    LodgeBulkSelection,
    RegistrationMode,
    SelectionState,
)


def build_lodge_bulk_selection(
    package: PackageDefinition,
    quantity: int,
    selected_at: datetime | None = None,
) -> LodgeBulkSelection:
    """
    Build a bulk selection from a captured package

    Args:
        package: Captured package definition (price and items per package)
        quantity: Number of packages bought
        selected_at: Selection timestamp

    Returns:
        LodgeBulkSelection with will_generate_tickets and subtotal derived

    Raises:
        InvalidQuantity: If quantity < 1
        NegativePrice: If the package price is negative
        EmptyPackageIncludes: If the package generates no tickets

    Example:
        >>> bulk = build_lodge_bulk_selection(table_package, 2)  # 10 seats at $1950
        >>> bulk.will_generate_tickets, bulk.subtotal
        (20, Decimal('3900.00'))
    """
    validate_quantity(package.package_id, quantity)
    validate_price(package.package_id, package.price)

    items_per_package = package.tickets_per_package()
    if items_per_package < 1:
        raise EmptyPackageIncludes(package.package_id)

    unit_price = quantize_money(package.price)
    return LodgeBulkSelection(
        package_id=package.package_id,
        quantity=quantity,
        unit_price=unit_price,
        items_per_package=items_per_package,
        subtotal=quantize_money(unit_price * quantity),
        will_generate_tickets=quantity * items_per_package,
        selection_timestamp=selected_at,
    )


def set_lodge_bulk_selection(
    state: SelectionState,
    package: PackageDefinition,
    quantity: int,
    selected_at: datetime | None = None,
) -> SelectionState:
    """
    Replace the lodge's bulk selection

    Raises:
        ModeMismatch: If the registration is not a lodge registration
    """
    if state.registration_type is not RegistrationMode.LODGE:
        raise ModeMismatch("set_lodge_bulk_selection", _mode_value(state))
    bulk = build_lodge_bulk_selection(package, quantity, selected_at)
    return state.model_copy(update={"lodge_bulk_selection": bulk}, deep=True)


def clear_lodge_bulk_selection(state: SelectionState) -> SelectionState:
    """Remove the lodge's bulk selection (no-op when there is none)"""
    return state.model_copy(update={"lodge_bulk_selection": None}, deep=True)


def _mode_value(state: SelectionState) -> str | None:
    return state.registration_type.value if state.registration_type else None
