"""
Tests for lodge registration form validation
"""

from lodgetix_registration.catalog.models import PackageDefinition
from lodgetix_registration.lodge.invariants import (
    PACKAGE_SELECTION_REQUIRED,
    get_lodge_validation_errors,
    is_lodge_form_valid,
)
from lodgetix_registration.lodge.models import BookingContact, LodgeDetails, LodgeForm
from lodgetix_registration.selection.lodge import build_lodge_bulk_selection


def _complete_form(**overrides: object) -> LodgeForm:
    form = LodgeForm(
        customer=BookingContact(
            title="W Bro",
            first_name="John",
            last_name="Smith",
            email="secretary@sydneylodge.org.au",
            mobile="+61412345678",
        ),
        details=LodgeDetails(grand_lodge_id="gl-nsw", lodge_id="lodge-42", lodge_name="Lodge Sydney No. 42"),
    )
    return form.model_copy(update=overrides)


def test_missing_package_selection() -> None:
    form = _complete_form()

    assert get_lodge_validation_errors(form) == [PACKAGE_SELECTION_REQUIRED]
    assert PACKAGE_SELECTION_REQUIRED == "Package selection is required"
    assert not is_lodge_form_valid(form)


def test_complete_form_is_valid(lodge_table: PackageDefinition) -> None:
    form = _complete_form(bulk_selection=build_lodge_bulk_selection(lodge_table, 2))

    assert get_lodge_validation_errors(form) == []
    assert is_lodge_form_valid(form)


def test_empty_form_lists_every_problem() -> None:
    assert get_lodge_validation_errors(LodgeForm()) == [
        "First name is required",
        "Last name is required",
        "Email is required",
        "Mobile number is required",
        "Grand lodge selection is required",
        "Lodge selection is required",
        "Package selection is required",
    ]


def test_invalid_email(lodge_table: PackageDefinition) -> None:
    form = _complete_form(bulk_selection=build_lodge_bulk_selection(lodge_table, 1))
    form = form.model_copy(update={"customer": form.customer.model_copy(update={"email": "secretary"})})

    assert get_lodge_validation_errors(form) == ["Email address is invalid"]


def test_whitespace_names_are_missing(lodge_table: PackageDefinition) -> None:
    form = _complete_form(bulk_selection=build_lodge_bulk_selection(lodge_table, 1))
    form = form.model_copy(update={"customer": form.customer.model_copy(update={"first_name": "   "})})

    assert get_lodge_validation_errors(form) == ["First name is required"]


def test_form_wire_shape() -> None:
    wire = _complete_form().to_wire()

    assert wire["customer"]["firstName"] == "John"
    assert wire["details"]["grandLodgeId"] == "gl-nsw"
    assert wire["bulkSelection"] is None
