"""
Selection - Attendee selections, lodge bulk selections and their reducers

Models are exported here; reducers, expansion and the legacy adapter are
imported from their own modules.
"""

from lodgetix_registration.selection.models import (
    AttendeeSelection,
    EnhancedSelection,
    LegacySelection,
    LodgeBulkSelection,
    PackageSelection,
    RegistrationMode,
    SelectionKind,
    SelectionState,
    TicketLineItem,
    TicketQuantity,
    TicketSelectionItem,
)

__all__ = [
    "AttendeeSelection",
    "EnhancedSelection",
    "LegacySelection",
    "LodgeBulkSelection",
    "PackageSelection",
    "RegistrationMode",
    "SelectionKind",
    "SelectionState",
    "TicketLineItem",
    "TicketQuantity",
    "TicketSelectionItem",
]
