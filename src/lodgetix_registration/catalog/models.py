"""
Catalog Domain Models - Ticket and package definitions

These are immutable copies of catalog rows captured when a wizard step
loads a function's tickets and packages. The engine never subscribes to
catalog changes mid-session: a selection is always priced from the copy
that was captured when it was made.

Key concepts:
- TicketDefinition: a ticket for one event within a function
- PackageDefinition: a priced bundle of included tickets, sold at its own price
- Catalog: the captured tickets and packages for one function
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol

from pydantic import ConfigDict, Field

from lodgetix_registration.kernel.errors import CatalogEntryNotFound
from lodgetix_registration.kernel.wire import WireModel


class AvailabilityStatus(str, Enum):
    """
    Availability classification captured with a ticket snapshot

    Derived from the available count at capture time:
    - AVAILABLE: unlimited, or more than the low-stock threshold left
    - LOW_STOCK: at or below the threshold
    - SOLD_OUT: none left
    """

    AVAILABLE = "available"
    LOW_STOCK = "low_stock"
    SOLD_OUT = "sold_out"


def determine_availability_status(
    available_count: int | None, low_stock_threshold: int = 10
) -> AvailabilityStatus:
    """
    Classify an available count

    Args:
        available_count: Remaining capacity (None means unlimited)
        low_stock_threshold: Count at or below which stock is low

    Returns:
        AvailabilityStatus for the count
    """
    if available_count is None:
        return AvailabilityStatus.AVAILABLE
    if available_count <= 0:
        return AvailabilityStatus.SOLD_OUT
    if available_count <= low_stock_threshold:
        return AvailabilityStatus.LOW_STOCK
    return AvailabilityStatus.AVAILABLE


class TicketDefinition(WireModel):
    """
    A ticket for one event of a function

    Attributes:
        ticket_id: Catalog identifier (event_ticket id)
        event_id: Owning event
        function_id: Owning function (the multi-event occasion)
        name: Display name, e.g. "Gala Dinner Ticket"
        price: Unit price in the policy currency
        total_capacity/available_count/reserved_count/sold_count: capacity counters
            at capture time (None = unlimited / unknown)
        is_active: Whether the ticket is on sale
        eligible_attendee_types: Attendee-type allow-list (empty = anyone)
    """

    ticket_id: str = Field(..., min_length=1)
    event_id: str
    function_id: str | None = None
    name: str
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    total_capacity: int | None = Field(default=None, ge=0)
    available_count: int | None = Field(default=None, ge=0)
    reserved_count: int | None = Field(default=None, ge=0)
    sold_count: int | None = Field(default=None, ge=0)
    is_active: bool = True
    eligible_attendee_types: tuple[str, ...] = ()

    # Event display details travel with the ticket row
    event_title: str | None = None
    event_subtitle: str | None = None
    event_slug: str | None = None

    def availability_status(self, low_stock_threshold: int = 10) -> AvailabilityStatus:
        """Classify this ticket's availability at capture time"""
        return determine_availability_status(self.available_count, low_stock_threshold)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "TicketDefinition":
        """
        Build from a catalog row (function tickets view)

        Accepts the database column names (id, event_id, is_active, ...) and
        the camelCase eligibility field used by the tickets service.
        """
        return cls(
            ticket_id=record.get("ticket_id") or record["id"],
            event_id=record["event_id"],
            function_id=record.get("function_id"),
            name=record["name"],
            description=record.get("description"),
            price=Decimal(str(record["price"])),
            total_capacity=record.get("total_capacity"),
            available_count=record.get("available_count"),
            reserved_count=record.get("reserved_count"),
            sold_count=record.get("sold_count"),
            is_active=record.get("is_active", True),
            eligible_attendee_types=tuple(
                record.get("eligibleAttendeeTypes")
                or record.get("eligible_attendee_types")
                or ()
            ),
            event_title=record.get("event_title"),
            event_subtitle=record.get("event_subtitle"),
            event_slug=record.get("event_slug"),
        )

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "ticketId": "et_123",
                    "eventId": "evt_456",
                    "functionId": "fn_001",
                    "name": "Gala Dinner Ticket",
                    "price": "150.00",
                    "totalCapacity": 500,
                    "availableCount": 125,
                    "isActive": True,
                    "eligibleAttendeeTypes": ["mason", "guest"],
                }
            ]
        },
    )


class PackageDefinition(WireModel):
    """
    A priced bundle of tickets

    A package is sold as one line item at its own price. The price may be
    discounted relative to the included tickets and is NEVER recomputed
    from them.

    Attributes:
        package_id: Catalog identifier
        name: Display name, e.g. "Full Weekend Package"
        price: Package unit price
        original_price/discount: Optional pre-discount display values
        included_ticket_ids: Tickets an attendee receives with the package
        includes_description: Display lines describing the inclusions
        items_per_package: Seats a bulk purchase of one package generates
            (catalog "qty"); defaults to the number of included tickets
        eligible_attendee_types/eligible_registration_types: allow-lists
    """

    package_id: str = Field(..., min_length=1)
    function_id: str | None = None
    name: str
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    original_price: Decimal | None = Field(default=None, ge=0)
    discount: Decimal | None = Field(default=None, ge=0)
    included_ticket_ids: tuple[str, ...] = ()
    includes_description: tuple[str, ...] = ()
    items_per_package: int | None = Field(default=None, ge=1)
    is_active: bool = True
    eligible_attendee_types: tuple[str, ...] = ()
    eligible_registration_types: tuple[str, ...] = ()

    def tickets_per_package(self) -> int:
        """Number of tickets (seats) one copy of this package generates"""
        if self.items_per_package is not None:
            return self.items_per_package
        return len(self.included_ticket_ids)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PackageDefinition":
        """Build from a catalog row (packages table: id, includes, qty, ...)"""
        original_price = record.get("original_price")
        discount = record.get("discount")
        return cls(
            package_id=record.get("package_id") or record["id"],
            function_id=record.get("function_id"),
            name=record["name"],
            description=record.get("description"),
            price=Decimal(str(record["price"])),
            original_price=Decimal(str(original_price)) if original_price is not None else None,
            discount=Decimal(str(discount)) if discount is not None else None,
            included_ticket_ids=tuple(record.get("includes") or ()),
            includes_description=tuple(record.get("includes_description") or ()),
            items_per_package=record.get("qty"),
            is_active=record.get("is_active", True),
            eligible_attendee_types=tuple(record.get("eligibleAttendeeTypes") or ()),
            eligible_registration_types=tuple(record.get("eligibleRegistrationTypes") or ()),
        )

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "packageId": "pkg_789",
                    "name": "Full Weekend Package",
                    "price": "180.00",
                    "originalPrice": "200.00",
                    "discount": "20.00",
                    "includedTicketIds": ["et_123"],
                    "includesDescription": ["Gala Dinner"],
                    "eligibleRegistrationTypes": ["individuals", "delegation"],
                }
            ]
        },
    )


class CatalogSource(Protocol):
    """
    Inbound catalog lookup owned by an external service

    Returns the ticket and package definitions on sale for a function.
    """

    def fetch(self, function_id: str) -> tuple[list[TicketDefinition], list[PackageDefinition]]:
        ...


class Catalog(WireModel):
    """
    Captured tickets and packages for one function

    A Catalog is a snapshot. Capturing again produces a new Catalog; an
    existing one is never updated in place.
    """

    model_config = ConfigDict(frozen=True)

    function_id: str | None = None
    tickets: dict[str, TicketDefinition] = Field(default_factory=dict)
    packages: dict[str, PackageDefinition] = Field(default_factory=dict)

    @classmethod
    def capture(
        cls,
        function_id: str | None,
        tickets: Iterable[TicketDefinition] = (),
        packages: Iterable[PackageDefinition] = (),
    ) -> "Catalog":
        """
        Capture definitions into a new snapshot

        Args:
            function_id: Function the definitions belong to
            tickets: Ticket definitions (later duplicates win)
            packages: Package definitions (later duplicates win)

        Returns:
            New Catalog
        """
        return cls(
            function_id=function_id,
            tickets={t.ticket_id: t for t in tickets},
            packages={p.package_id: p for p in packages},
        )

    @classmethod
    def from_source(cls, source: CatalogSource, function_id: str) -> "Catalog":
        """Capture a snapshot from an external catalog lookup"""
        tickets, packages = source.fetch(function_id)
        return cls.capture(function_id, tickets, packages)

    def with_definitions(
        self,
        tickets: Iterable[TicketDefinition] = (),
        packages: Iterable[PackageDefinition] = (),
    ) -> "Catalog":
        """Return a new snapshot that also holds the given definitions"""
        return Catalog(
            function_id=self.function_id,
            tickets={**self.tickets, **{t.ticket_id: t for t in tickets}},
            packages={**self.packages, **{p.package_id: p for p in packages}},
        )

    def get_ticket(self, ticket_id: str) -> TicketDefinition | None:
        """Get ticket definition by ID"""
        return self.tickets.get(ticket_id)

    def get_package(self, package_id: str) -> PackageDefinition | None:
        """Get package definition by ID"""
        return self.packages.get(package_id)

    def require_ticket(self, ticket_id: str) -> TicketDefinition:
        """
        Get ticket definition by ID

        Raises:
            CatalogEntryNotFound: If the ticket was never captured
        """
        ticket = self.get_ticket(ticket_id)
        if ticket is None:
            raise CatalogEntryNotFound("ticket", ticket_id)
        return ticket

    def require_package(self, package_id: str) -> PackageDefinition:
        """
        Get package definition by ID

        Raises:
            CatalogEntryNotFound: If the package was never captured
        """
        package = self.get_package(package_id)
        if package is None:
            raise CatalogEntryNotFound("package", package_id)
        return package

    def included_tickets(self, package: PackageDefinition) -> list[TicketDefinition]:
        """Captured definitions of a package's included tickets (missing ones skipped)"""
        return [
            self.tickets[ticket_id]
            for ticket_id in package.included_ticket_ids
            if ticket_id in self.tickets
        ]
