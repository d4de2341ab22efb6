"""
Kernel - Shared infrastructure for the registration engine

Errors, structured logging, identifiers, time, retry, metrics and the
engine policy. Domain modules build on these and never on each other's
internals.
"""

from lodgetix_registration.kernel.errors import (
    CatalogEntryNotFound,
    ConfigurationError,
    DraftDecodeError,
    DraftNotFound,
    EmptyPackageIncludes,
    InvalidQuantity,
    InvalidRegistrationMode,
    InvariantViolation,
    LodgetixError,
    ModeMismatch,
    NegativePrice,
    PersistenceError,
)
from lodgetix_registration.kernel.ids import IdFactory, generate_draft_id, generate_id
from lodgetix_registration.kernel.policy import EnginePolicy
from lodgetix_registration.kernel.time import RealTimeProvider, TestTimeProvider, TimeProvider

__all__ = [
    # IDs
    "IdFactory",
    "generate_id",
    "generate_draft_id",
    # Time
    "TimeProvider",
    "RealTimeProvider",
    "TestTimeProvider",
    # Policy
    "EnginePolicy",
    # Errors
    "LodgetixError",
    "ConfigurationError",
    "EmptyPackageIncludes",
    "CatalogEntryNotFound",
    "InvariantViolation",
    "InvalidQuantity",
    "NegativePrice",
    "InvalidRegistrationMode",
    "ModeMismatch",
    "PersistenceError",
    "DraftNotFound",
    "DraftDecodeError",
]
