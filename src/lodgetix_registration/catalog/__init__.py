"""
Catalog - Captured ticket and package definitions and their metadata snapshots
"""

from lodgetix_registration.catalog.models import (
    AvailabilityStatus,
    Catalog,
    CatalogSource,
    PackageDefinition,
    TicketDefinition,
    determine_availability_status,
)

__all__ = [
    "AvailabilityStatus",
    "Catalog",
    "CatalogSource",
    "PackageDefinition",
    "TicketDefinition",
    "determine_availability_status",
]
