"""
Custom exceptions for the LodgeTix registration engine

Well-defined error hierarchy enables precise error handling and
clear error messages for wizard steps and API callers.

Three families matter to callers:
- ConfigurationError: a captured catalog entity is malformed (fatal to the operation)
- InvariantViolation: a pure computation received impossible input
- PersistenceError: the draft API could not save or load (retryable, never data loss)

Selection payload problems are NOT exceptions - they are returned as
field-level messages by the validation functions.
"""


class LodgetixError(Exception):
    """Base exception for all registration engine errors"""

    pass


# Catalog configuration errors


class ConfigurationError(LodgetixError):
    """
    Raised when a catalog entity is malformed

    Must never be swallowed into a zero-value result - a package that
    silently expands to zero tickets hides a data-entry mistake.
    """

    pass


class EmptyPackageIncludes(ConfigurationError):
    """Raised when a package with no included tickets is expanded"""

    def __init__(self, package_id: str) -> None:
        self.package_id = package_id
        super().__init__(
            f"Package {package_id} has no included tickets - "
            "check the package catalog entry"
        )


class CatalogEntryNotFound(ConfigurationError):
    """Raised when a selection references a ticket or package that was never captured"""

    def __init__(self, kind: str, entry_id: str) -> None:
        self.kind = kind
        self.entry_id = entry_id
        super().__init__(f"{kind.capitalize()} {entry_id} not found in captured catalog")


# Computation invariants


class InvariantViolation(LodgetixError):
    """
    Raised when a pure computation cannot resolve its input

    Examples: negative quantity, negative captured price, quantity below one
    on expansion.
    """

    pass


class InvalidQuantity(InvariantViolation):
    """Raised when a selection quantity is not a positive integer"""

    def __init__(self, item_id: str, quantity: object) -> None:
        self.item_id = item_id
        self.quantity = quantity
        super().__init__(
            f"Quantity for {item_id} must be a positive integer, got {quantity!r}"
        )


class NegativePrice(InvariantViolation):
    """Raised when a captured unit price is negative"""

    def __init__(self, item_id: str, price: object) -> None:
        self.item_id = item_id
        self.price = price
        super().__init__(f"Captured price for {item_id} is negative: {price}")


class ModeMismatch(LodgetixError):
    """
    Raised when a selection is made against the wrong registration type

    Attendee selections belong to individuals/delegation registrations and
    the lodge bulk selection belongs to lodge registrations; the two never
    hold live selections at the same time.
    """

    def __init__(self, operation: str, current_mode: str | None) -> None:
        self.operation = operation
        self.current_mode = current_mode
        super().__init__(
            f"{operation} is not allowed for registration type {current_mode or 'unset'}"
        )


class InvalidRegistrationMode(LodgetixError):
    """Raised when a registration type string is not recognised"""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"Unknown registration type {value!r} - "
            "expected individuals, lodge or delegation"
        )


# Persistence errors


class PersistenceError(LodgetixError):
    """
    Raised when a draft save or load fails

    Local selection state is retained in memory; the caller should offer
    a retry rather than treat this as data loss.
    """

    def __init__(self, message: str, *, draft_id: str | None = None, retryable: bool = True) -> None:
        self.draft_id = draft_id
        self.retryable = retryable
        super().__init__(message)


class DraftNotFound(PersistenceError):
    """Raised when the draft API has no document for a draft id"""

    def __init__(self, draft_id: str) -> None:
        super().__init__(f"Draft {draft_id} not found", draft_id=draft_id, retryable=False)


class DraftDecodeError(PersistenceError):
    """Raised when a stored draft document fails schema validation on load"""

    def __init__(self, reason: str, draft_id: str | None = None) -> None:
        self.reason = reason
        super().__init__(
            f"Draft document could not be decoded: {reason}",
            draft_id=draft_id,
            retryable=False,
        )
