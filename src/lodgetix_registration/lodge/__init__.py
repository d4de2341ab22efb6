"""
Lodge - Lodge registration form and its validation
"""

from lodgetix_registration.lodge.invariants import (
    PACKAGE_SELECTION_REQUIRED,
    get_lodge_validation_errors,
    is_lodge_form_valid,
)
from lodgetix_registration.lodge.models import BookingContact, LodgeDetails, LodgeForm

__all__ = [
    "PACKAGE_SELECTION_REQUIRED",
    "BookingContact",
    "LodgeDetails",
    "LodgeForm",
    "get_lodge_validation_errors",
    "is_lodge_form_valid",
]
