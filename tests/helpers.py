"""
Test Helper Functions - Builders and a fake draft API

Provides reusable builders for selection entries and an in-memory draft
API served through httpx.MockTransport, so persistence tests never open
a socket.

Fun fact: httpx.MockTransport calls a plain function with the request and
sends back whatever Response it returns - the whole client stack above it
(headers, JSON encoding, raise_for_status) runs for real.
"""

import json
from decimal import Decimal
from typing import Any

import httpx

from lodgetix_registration.kernel.policy import EnginePolicy
from lodgetix_registration.persistence.client import DraftClient
from lodgetix_registration.selection.models import (
    AttendeeSelection,
    PackageSelection,
    TicketQuantity,
    TicketSelectionItem,
)

DRAFT_API_BASE_URL = "http://drafts.test"


def package_entry(
    package_id: str,
    unit_price: str,
    quantity: int = 1,
    tickets: dict[str, int] | None = None,
) -> PackageSelection:
    """
    Builder for a priced package entry

    Example:
        >>> package_entry("pkg_789", "180.00", tickets={"et_123": 1})
    """
    return PackageSelection(
        package_id=package_id,
        quantity=quantity,
        tickets=[
            TicketQuantity(ticket_id=ticket_id, quantity=q)
            for ticket_id, q in (tickets or {}).items()
        ],
        unit_price=Decimal(unit_price),
    )


def ticket_entry(ticket_id: str, unit_price: str, quantity: int = 1) -> TicketSelectionItem:
    """Builder for a priced individual ticket entry"""
    return TicketSelectionItem(
        ticket_id=ticket_id, quantity=quantity, unit_price=Decimal(unit_price)
    )


def attendee(
    packages: list[PackageSelection] | None = None,
    tickets: list[TicketSelectionItem] | None = None,
) -> AttendeeSelection:
    return AttendeeSelection(packages=packages or [], individual_tickets=tickets or [])


class FakeDraftApi:
    """
    In-memory stand-in for the registration draft API

    Stores saved documents by draft id. Failures can be queued: each entry
    in fail_with is consumed by one request and is either an HTTP status
    code or an exception class to raise from the transport.
    """

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.fail_with: list[int | type[Exception]] = []
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self, policy: EnginePolicy | None = None) -> DraftClient:
        return DraftClient(DRAFT_API_BASE_URL, policy=policy, transport=self.transport)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with:
            failure = self.fail_with.pop(0)
            if isinstance(failure, int):
                return httpx.Response(failure, json={"error": "Injected failure"})
            raise failure("Injected transport failure", request=request)

        # /api/registrations/drafts/{draftId}/tickets
        draft_id = request.url.path.split("/")[4]

        if request.method == "POST":
            document = json.loads(request.content)
            self.documents[draft_id] = document
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "message": "Ticket selections saved successfully",
                    "draftId": draft_id,
                    "attendeeCount": len(document.get("ticketSelections", {})),
                },
            )

        if draft_id not in self.documents:
            return httpx.Response(404, json={"error": "Draft not found"})
        return httpx.Response(
            200,
            json={
                "success": True,
                "draftData": {
                    **self.documents[draft_id],
                    "draftId": draft_id,
                    "userId": "user-1",
                    "lastUpdated": "2025-01-15T12:00:00Z",
                    "version": 1,
                },
            },
        )
