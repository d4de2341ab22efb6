"""
Lodge Registration Form - Booking contact and lodge identity

A lodge registration is made by one booking contact on behalf of a lodge.
The form holds who is booking, which lodge is buying, and the bulk
package selection made on the ticket step.
"""

from pydantic import Field

from lodgetix_registration.kernel.wire import WireModel
from lodgetix_registration.selection.models import LodgeBulkSelection


class BookingContact(WireModel):
    """Person making the booking for the lodge (PII - never logged)"""

    title: str | None = None
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    mobile: str = ""


class LodgeDetails(WireModel):
    """Which lodge (and grand lodge) is registering"""

    grand_lodge_id: str | None = None
    lodge_id: str | None = None
    lodge_name: str | None = None


class LodgeForm(WireModel):
    """Everything the lodge registration step collects"""

    customer: BookingContact = Field(default_factory=BookingContact)
    details: LodgeDetails = Field(default_factory=LodgeDetails)
    bulk_selection: LodgeBulkSelection | None = None
