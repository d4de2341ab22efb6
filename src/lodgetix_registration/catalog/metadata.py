"""
Captured Metadata - Display and audit snapshots

When a ticket or package is selected, the wizard captures everything the
operator could see at that moment: names, prices, event details and an
availability snapshot. These records are persisted with the draft for
display and audit. Pricing never reads them - prices come from the
captured unit price on each selection entry.

Fun fact: the availability snapshot is never refreshed. A ticket captured
as low_stock stays low_stock in the draft even after it sells out.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field

from lodgetix_registration.catalog.models import (
    AvailabilityStatus,
    Catalog,
    PackageDefinition,
    TicketDefinition,
)
from lodgetix_registration.kernel.policy import EnginePolicy
from lodgetix_registration.kernel.time import TimeProvider
from lodgetix_registration.kernel.wire import WireModel


class EventMetadata(WireModel):
    """Event details nested within a ticket snapshot"""

    event_id: str
    event_title: str
    event_subtitle: str | None = None
    event_slug: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    venue: str | None = None
    description: str | None = None


class AvailabilitySnapshot(WireModel):
    """Capacity counters and derived status at selection time"""

    is_active: bool = True
    total_capacity: int | None = None
    available_count: int | None = None
    reserved_count: int | None = None
    sold_count: int | None = None
    status: AvailabilityStatus = AvailabilityStatus.AVAILABLE


class TicketMetadata(WireModel):
    """Complete ticket snapshot captured when a ticket is selected"""

    ticket_id: str
    name: str
    description: str | None = None
    price: Decimal
    event: EventMetadata
    availability: AvailabilitySnapshot
    status: Literal["unpaid"] = "unpaid"
    selection_timestamp: datetime
    function_id: str | None = None


class PackageMetadata(WireModel):
    """Complete package snapshot including full metadata of included tickets"""

    package_id: str
    name: str
    description: str | None = None
    price: Decimal
    original_price: Decimal | None = None
    discount: Decimal | None = None
    included_tickets: list[TicketMetadata] = Field(default_factory=list)
    includes_description: list[str] | None = None
    status: Literal["unpaid"] = "unpaid"
    selection_timestamp: datetime
    function_id: str | None = None


class FunctionDates(WireModel):
    start_date: date
    end_date: date


class FunctionMetadata(WireModel):
    """Function-level details captured when the registration starts"""

    function_id: str
    function_name: str
    function_description: str | None = None
    function_dates: FunctionDates | None = None
    organization_id: str | None = None
    organization_name: str | None = None
    capture_timestamp: datetime


def capture_ticket_metadata(
    ticket: TicketDefinition,
    time_provider: TimeProvider,
    policy: EnginePolicy | None = None,
) -> TicketMetadata:
    """
    Snapshot a ticket definition for display and audit

    Args:
        ticket: Captured ticket definition
        time_provider: Source of the selection timestamp
        policy: Engine policy (low-stock threshold)

    Returns:
        TicketMetadata with availability status derived at capture time
    """
    policy = policy or EnginePolicy()
    return TicketMetadata(
        ticket_id=ticket.ticket_id,
        name=ticket.name,
        description=ticket.description,
        price=ticket.price,
        event=EventMetadata(
            event_id=ticket.event_id,
            event_title=ticket.event_title or ticket.name,
            event_subtitle=ticket.event_subtitle,
            event_slug=ticket.event_slug,
        ),
        availability=AvailabilitySnapshot(
            is_active=ticket.is_active,
            total_capacity=ticket.total_capacity,
            available_count=ticket.available_count,
            reserved_count=ticket.reserved_count,
            sold_count=ticket.sold_count,
            status=ticket.availability_status(policy.low_stock_threshold),
        ),
        selection_timestamp=time_provider.now(),
        function_id=ticket.function_id,
    )


def capture_package_metadata(
    package: PackageDefinition,
    catalog: Catalog,
    time_provider: TimeProvider,
    policy: EnginePolicy | None = None,
) -> PackageMetadata:
    """
    Snapshot a package definition with its included tickets

    Included tickets that were never captured into the catalog are left
    out of included_tickets; the package's own id list is unaffected.
    """
    included = [
        capture_ticket_metadata(ticket, time_provider, policy)
        for ticket in catalog.included_tickets(package)
    ]
    return PackageMetadata(
        package_id=package.package_id,
        name=package.name,
        description=package.description,
        price=package.price,
        original_price=package.original_price,
        discount=package.discount,
        included_tickets=included,
        includes_description=list(package.includes_description) or None,
        selection_timestamp=time_provider.now(),
        function_id=package.function_id,
    )


def capture_function_metadata(
    function_id: str,
    function_name: str,
    time_provider: TimeProvider,
    *,
    description: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    organization_id: str | None = None,
    organization_name: str | None = None,
) -> FunctionMetadata:
    """Snapshot function-level details"""
    dates = None
    if start_date is not None and end_date is not None:
        dates = FunctionDates(start_date=start_date, end_date=end_date)
    return FunctionMetadata(
        function_id=function_id,
        function_name=function_name,
        function_description=description,
        function_dates=dates,
        organization_id=organization_id,
        organization_name=organization_name,
        capture_timestamp=time_provider.now(),
    )
