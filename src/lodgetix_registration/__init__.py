"""
LodgeTix Registration - Selection and pricing engine for function registrations

Tracks what an operator chooses to buy for a function (individual tickets,
bundled packages or a lodge's bulk block), expands packages into
attributable tickets, keeps the order total consistent across every step
of the registration wizard, and saves the whole thing as a draft that
restores to identical totals.

Fun fact: a lodge table of ten is bought before anyone at the table has a
name. The seats exist as a count until the lodge secretary fills them in.
"""

from lodgetix_registration.registration import RegistrationSession

__version__ = "0.1.0"
__all__ = ["RegistrationSession", "__version__"]
