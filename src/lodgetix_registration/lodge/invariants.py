"""
Lodge Form Validation

Reporting validation for the lodge registration step. Problems come back
as messages for the form; nothing here raises.
"""

from lodgetix_registration.lodge.models import LodgeForm

PACKAGE_SELECTION_REQUIRED = "Package selection is required"


def get_lodge_validation_errors(form: LodgeForm) -> list[str]:
    """
    List everything preventing a lodge registration from proceeding

    Required: booking contact first name, last name, email and mobile;
    grand lodge and lodge; a bulk package selection.

    Example:
        >>> get_lodge_validation_errors(form_without_selection)
        ['Package selection is required']
    """
    errors: list[str] = []
    customer = form.customer
    details = form.details

    if not customer.first_name.strip():
        errors.append("First name is required")
    if not customer.last_name.strip():
        errors.append("Last name is required")
    if not customer.email.strip():
        errors.append("Email is required")
    elif "@" not in customer.email:
        errors.append("Email address is invalid")
    if not customer.mobile.strip():
        errors.append("Mobile number is required")

    if not details.grand_lodge_id:
        errors.append("Grand lodge selection is required")
    if not details.lodge_id:
        errors.append("Lodge selection is required")

    if form.bulk_selection is None:
        errors.append(PACKAGE_SELECTION_REQUIRED)

    return errors


def is_lodge_form_valid(form: LodgeForm) -> bool:
    """True when the lodge form has no validation errors"""
    return not get_lodge_validation_errors(form)
