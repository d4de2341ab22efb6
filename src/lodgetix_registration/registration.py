"""
RegistrationSession - Main façade for one registration

The session owns the SelectionState of a single registration and is the
only thing the wizard talks to. Every mutation goes through a selection
command, and the order summary is recomputed after each one, so the
summary the UI reads is always the one a fresh computation would give.

Example:
    >>> from lodgetix_registration import RegistrationSession
    >>> session = RegistrationSession("fn_001", catalog)
    >>> session.set_registration_type("individuals")
    >>> session.select_package("att-1", "pkg_789")
    >>> session.order_summary.subtotal
    Decimal('180.00')
    >>> session.save_draft()
"""

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from lodgetix_registration.catalog.metadata import (
    FunctionMetadata,
    PackageMetadata,
    TicketMetadata,
    capture_function_metadata,
    capture_package_metadata,
    capture_ticket_metadata,
)
from lodgetix_registration.catalog.models import Catalog, PackageDefinition, TicketDefinition
from lodgetix_registration.kernel.errors import PersistenceError
from lodgetix_registration.kernel.ids import IdFactory, generate_draft_id
from lodgetix_registration.kernel.logging import bind_registration_context, get_logger
from lodgetix_registration.kernel.metrics import order_subtotal
from lodgetix_registration.kernel.policy import EnginePolicy
from lodgetix_registration.kernel.time import RealTimeProvider, TimeProvider
from lodgetix_registration.lodge.invariants import get_lodge_validation_errors
from lodgetix_registration.lodge.models import BookingContact, LodgeDetails, LodgeForm
from lodgetix_registration.persistence.client import DraftClient, DraftSaveResult
from lodgetix_registration.persistence.codec import (
    DraftDocument,
    parse_document,
    restore_state,
    serialize_state,
    ticket_selections_view,
)
from lodgetix_registration.pricing.aggregator import compute_order_summary, find_zero_priced_items
from lodgetix_registration.pricing.fees import calculate_processing_fees
from lodgetix_registration.pricing.models import (
    FeeBreakdown,
    OrderSummary,
    TicketSummary,
    ZeroPricedItem,
)
from lodgetix_registration.pricing.summary import build_ticket_summary
from lodgetix_registration.selection.commands import (
    AddIndividualTicket,
    AddPackageSelection,
    ClearAttendee,
    ClearLodgeBulkSelection,
    ClearRegistration,
    RemoveAttendee,
    RemoveSelection,
    SelectionCommand,
    SetLodgeBulkSelection,
    SwitchRegistrationMode,
)
from lodgetix_registration.selection.invariants import find_duplicate_ticket_selections
from lodgetix_registration.selection.ledger import SelectionLedger
from lodgetix_registration.selection.legacy import LegacySummary, legacy_packages_view
from lodgetix_registration.selection.models import (
    RegistrationMode,
    SelectionKind,
    SelectionState,
)

logger = get_logger(__name__)


class RegistrationSession:
    """
    Registration mode controller and selection façade

    Provides a unified API for:
    - Choosing and switching the registration type
    - Selecting packages and tickets per attendee, or a lodge bulk package
    - Reading the maintained order summary, fee estimate and review summary
    - Saving to and restoring from the draft API
    """

    def __init__(
        self,
        function_id: str | None = None,
        catalog: Catalog | None = None,
        *,
        policy: EnginePolicy | None = None,
        time_provider: TimeProvider | None = None,
        id_factory: IdFactory | None = None,
        draft_client: DraftClient | None = None,
        draft_id: str | None = None,
    ) -> None:
        """
        Initialize a registration session

        Args:
            function_id: Function being registered for
            catalog: Captured catalog (an empty one if None)
            policy: Engine policy (uses defaults if None)
            time_provider: Time provider (uses real time if None)
            id_factory: Source of ticket record ids
            draft_client: Draft API client (built from policy when first needed)
            draft_id: Existing draft id (a new one is generated if None)
        """
        self.policy = policy or EnginePolicy()
        self.time_provider = time_provider or RealTimeProvider()
        self.id_factory = id_factory
        self.catalog = catalog if catalog is not None else Catalog(function_id=function_id)
        self._draft_client = draft_client
        self.draft_id = draft_id or generate_draft_id()

        self.state = SelectionState(function_id=function_id or self.catalog.function_id)
        bind_registration_context(self.draft_id, self.state.function_id)
        self.order_summary = compute_order_summary(None, self.state)
        self.function_metadata: FunctionMetadata | None = None
        self.ticket_metadata: dict[str, TicketMetadata] = {}
        self.package_metadata: dict[str, PackageMetadata] = {}
        self.lodge_form = LodgeForm()
        self.last_error: PersistenceError | None = None

        self._ledger = SelectionLedger(self.catalog, self.id_factory, self.time_provider)

    # ========================================================================
    # State plumbing
    # ========================================================================

    @property
    def registration_type(self) -> RegistrationMode | None:
        return self.state.registration_type

    @property
    def draft_client(self) -> DraftClient:
        if self._draft_client is None:
            self._draft_client = DraftClient(policy=self.policy)
        return self._draft_client

    def apply(self, command: SelectionCommand) -> OrderSummary:
        """
        Apply one selection command and refresh the order summary

        The state is swapped only after the command succeeds; a failing
        command leaves the session untouched.

        Returns:
            The refreshed order summary
        """
        new_state = self._ledger.apply(self.state, command)
        self._commit(new_state)
        return self.order_summary

    def _commit(self, state: SelectionState) -> None:
        self.state = state
        self.order_summary = compute_order_summary(state.registration_type, state)
        mode = state.registration_type.value if state.registration_type else "unset"
        bind_registration_context(
            self.draft_id, state.function_id, state.registration_type.value if state.registration_type else None
        )
        order_subtotal.labels(registration_type=mode).set(float(self.order_summary.subtotal))

    def recompute_order_summary(self) -> OrderSummary:
        """Compute the order summary from scratch (equals order_summary)"""
        return compute_order_summary(self.state.registration_type, self.state)

    # ========================================================================
    # Catalog and metadata capture
    # ========================================================================

    def capture_catalog(
        self,
        tickets: Iterable[TicketDefinition] = (),
        packages: Iterable[PackageDefinition] = (),
    ) -> Catalog:
        """Add freshly loaded definitions to the session's catalog snapshot"""
        self.catalog = self.catalog.with_definitions(tickets, packages)
        self._ledger.catalog = self.catalog
        return self.catalog

    def capture_function_metadata(
        self,
        function_name: str,
        *,
        description: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        organization_id: str | None = None,
        organization_name: str | None = None,
    ) -> FunctionMetadata:
        """Snapshot the function's display details"""
        self.function_metadata = capture_function_metadata(
            self.state.function_id or "",
            function_name,
            self.time_provider,
            description=description,
            start_date=start_date,
            end_date=end_date,
            organization_id=organization_id,
            organization_name=organization_name,
        )
        return self.function_metadata

    def _capture_ticket(self, ticket_id: str) -> None:
        ticket = self.catalog.get_ticket(ticket_id)
        if ticket is not None:
            self.ticket_metadata[ticket_id] = capture_ticket_metadata(
                ticket, self.time_provider, self.policy
            )

    def _capture_package(self, package_id: str) -> None:
        package = self.catalog.require_package(package_id)
        self.package_metadata[package_id] = capture_package_metadata(
            package, self.catalog, self.time_provider, self.policy
        )

    # ========================================================================
    # Registration type
    # ========================================================================

    def start_new_registration(
        self, registration_type: RegistrationMode | str, function_id: str | None = None
    ) -> None:
        """
        Begin a fresh registration of the given type

        Discards every selection, captured snapshot and the lodge form;
        the catalog and draft id are kept.
        """
        mode = RegistrationMode.parse(registration_type)
        self.function_metadata = None
        self.ticket_metadata = {}
        self.package_metadata = {}
        self.lodge_form = LodgeForm()
        self._commit(
            SelectionState(function_id=function_id or self.state.function_id, registration_type=mode)
        )
        logger.info("Registration started", registration_type=mode.value)

    def set_registration_type(self, registration_type: RegistrationMode | str) -> OrderSummary:
        """
        Switch the registration type

        Switching to lodge drops attendee selections; switching away from
        lodge drops the bulk selection.
        """
        previous = self.state.registration_type
        summary = self.apply(
            SwitchRegistrationMode(registration_type=RegistrationMode.parse(registration_type))
        )
        if previous is not self.state.registration_type:
            logger.info(
                "Registration type switched",
                previous=previous.value if previous else None,
                registration_type=self.state.registration_type.value,
            )
        return summary

    def clear_registration(self) -> OrderSummary:
        """
        Reset selections, ticket and package snapshots and the lodge form

        The function id and its captured function_metadata are kept: the
        operator is still registering for the same function. Use
        start_new_registration to begin again for another function.
        """
        summary = self.apply(ClearRegistration())
        self.ticket_metadata = {}
        self.package_metadata = {}
        self.lodge_form = LodgeForm()
        return summary

    # ========================================================================
    # Attendee selections
    # ========================================================================

    def select_package(self, attendee_id: str, package_id: str, quantity: int = 1) -> OrderSummary:
        """
        Select a package for an attendee

        Raises:
            CatalogEntryNotFound: If the package was never captured
            ModeMismatch: If the registration type does not allow attendee selections
            EmptyPackageIncludes / InvalidQuantity: See add_package_selection
        """
        summary = self.apply(
            AddPackageSelection(attendee_id=attendee_id, package_id=package_id, quantity=quantity)
        )
        self._capture_package(package_id)
        return summary

    def select_ticket(self, attendee_id: str, ticket_id: str, quantity: int = 1) -> OrderSummary:
        """Select an individual ticket for an attendee"""
        summary = self.apply(
            AddIndividualTicket(attendee_id=attendee_id, ticket_id=ticket_id, quantity=quantity)
        )
        self._capture_ticket(ticket_id)
        return summary

    def remove_selection(
        self, attendee_id: str, kind: SelectionKind | str, item_id: str
    ) -> OrderSummary:
        return self.apply(
            RemoveSelection(attendee_id=attendee_id, kind=SelectionKind(kind), item_id=item_id)
        )

    def clear_attendee(self, attendee_id: str) -> OrderSummary:
        return self.apply(ClearAttendee(attendee_id=attendee_id))

    def remove_attendee(self, attendee_id: str) -> OrderSummary:
        return self.apply(RemoveAttendee(attendee_id=attendee_id))

    # ========================================================================
    # Lodge registrations
    # ========================================================================

    def set_lodge_bulk_selection(self, package_id: str, quantity: int) -> OrderSummary:
        """
        Choose the lodge's package and how many to buy

        Raises:
            ModeMismatch: If this is not a lodge registration
        """
        summary = self.apply(SetLodgeBulkSelection(package_id=package_id, quantity=quantity))
        self._capture_package(package_id)
        return summary

    def clear_lodge_bulk_selection(self) -> OrderSummary:
        return self.apply(ClearLodgeBulkSelection())

    def update_lodge_customer(self, **fields: Any) -> BookingContact:
        """Update booking contact fields (first_name, last_name, email, mobile, title)"""
        customer = BookingContact.model_validate({**self.lodge_form.customer.model_dump(), **fields})
        self.lodge_form = self.lodge_form.model_copy(update={"customer": customer})
        return customer

    def update_lodge_details(self, **fields: Any) -> LodgeDetails:
        """Update lodge identity fields (grand_lodge_id, lodge_id, lodge_name)"""
        details = LodgeDetails.model_validate({**self.lodge_form.details.model_dump(), **fields})
        self.lodge_form = self.lodge_form.model_copy(update={"details": details})
        return details

    def current_lodge_form(self) -> LodgeForm:
        """The lodge form with the current bulk selection attached"""
        return self.lodge_form.model_copy(
            update={"bulk_selection": self.state.lodge_bulk_selection}
        )

    def get_lodge_validation_errors(self) -> list[str]:
        return get_lodge_validation_errors(self.current_lodge_form())

    def is_lodge_form_valid(self) -> bool:
        return not self.get_lodge_validation_errors()

    # ========================================================================
    # Derived views
    # ========================================================================

    def fees(self, is_domestic: bool = True) -> FeeBreakdown:
        """Advisory processing fee estimate for the current subtotal"""
        return calculate_processing_fees(
            self.order_summary.subtotal, self.policy, is_domestic=is_domestic
        )

    def ticket_summary(
        self,
        attendee_names: Mapping[str, str] | None = None,
        is_domestic: bool | None = None,
    ) -> TicketSummary:
        """Review-step summary; includes fees when is_domestic is given"""
        fees = self.fees(is_domestic) if is_domestic is not None else None
        return build_ticket_summary(
            self.state,
            self.catalog,
            self.order_summary,
            ticket_metadata=self.ticket_metadata,
            package_metadata=self.package_metadata,
            attendee_names=attendee_names,
            fees=fees,
        )

    def duplicate_ticket_warnings(self) -> dict[str, list[str]]:
        """attendee id -> tickets selected both in a package and individually"""
        warnings = {}
        for attendee_id, selection in self.state.attendee_selections.items():
            duplicates = find_duplicate_ticket_selections(selection)
            if duplicates:
                warnings[attendee_id] = duplicates
        return warnings

    def zero_priced_items(self) -> list[ZeroPricedItem]:
        return find_zero_priced_items(self.state)

    def ticket_selections_view(self) -> dict[str, dict[str, Any]]:
        return ticket_selections_view(self.state)

    def legacy_packages_view(self) -> dict[str, LegacySummary]:
        return legacy_packages_view(self.state)

    # ========================================================================
    # Persistence
    # ========================================================================

    def to_document(self) -> dict[str, Any]:
        """Serialize the session as a draft document"""
        return serialize_state(
            self.state,
            summary=self.order_summary,
            function_metadata=self.function_metadata,
            ticket_metadata=self.ticket_metadata,
            package_metadata=self.package_metadata,
        )

    @classmethod
    def from_document(
        cls,
        document: DraftDocument | Mapping[str, Any],
        catalog: Catalog | None = None,
        *,
        draft_id: str | None = None,
        **kwargs: Any,
    ) -> "RegistrationSession":
        """
        Restore a session from a draft document

        Raises:
            DraftDecodeError: If the document is invalid or an entry has no price
        """
        if not isinstance(document, DraftDocument):
            document = parse_document(document, draft_id=draft_id)
        state = restore_state(document, catalog, draft_id=draft_id)

        session = cls(state.function_id, catalog, draft_id=draft_id, **kwargs)
        session.function_metadata = document.function_metadata
        session.ticket_metadata = dict(document.ticket_metadata or {})
        session.package_metadata = dict(document.package_metadata or {})
        session._commit(state)
        return session

    def save_draft(self) -> DraftSaveResult:
        """
        Save the session to the draft API

        On failure the error is kept on last_error and re-raised; the
        in-memory selections are untouched so the caller can retry.

        Raises:
            PersistenceError: If the save fails
        """
        try:
            result = self.draft_client.save_draft(self.draft_id, self.to_document())
        except PersistenceError as e:
            self.last_error = e
            logger.warning("Draft save failed", draft_id=self.draft_id, retryable=e.retryable)
            raise
        self.last_error = None
        return result

    @classmethod
    def load_draft(
        cls,
        draft_id: str,
        draft_client: DraftClient,
        catalog: Catalog | None = None,
        **kwargs: Any,
    ) -> "RegistrationSession":
        """
        Load a session from the draft API

        Raises:
            DraftNotFound: If the draft does not exist
            DraftDecodeError: If the stored document is invalid
            PersistenceError: If the API is unreachable
        """
        document = draft_client.load_draft(draft_id)
        return cls.from_document(
            document, catalog, draft_id=draft_id, draft_client=draft_client, **kwargs
        )
