"""
Pytest configuration and shared fixtures

Fun fact: The name "conftest" comes from pytest's configuration testing
framework. Files named conftest.py are automatically discovered and their
fixtures are available to all tests in the same directory and subdirectories!
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from lodgetix_registration.catalog.models import Catalog, PackageDefinition, TicketDefinition
from lodgetix_registration.kernel.ids import SequentialIdFactory
from lodgetix_registration.kernel.policy import EnginePolicy
from lodgetix_registration.kernel.time import TestTimeProvider
from lodgetix_registration.registration import RegistrationSession
from lodgetix_registration.selection.models import RegistrationMode, SelectionState


@pytest.fixture
def test_time() -> TestTimeProvider:
    """
    Provide a controllable time provider for deterministic tests

    Default time: 2025-01-15 12:00:00 UTC
    """
    return TestTimeProvider(datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def policy() -> EnginePolicy:
    """Default engine policy"""
    return EnginePolicy()


@pytest.fixture
def fast_retry_policy() -> EnginePolicy:
    """
    Policy that retries without sleeping

    Fun fact: tenacity's wait_exponential clamps to max, so a zero max turns
    exponential backoff into no backoff at all.
    """
    return EnginePolicy(retry_attempts=3, retry_min_wait_ms=0, retry_max_wait_ms=0)


@pytest.fixture
def id_factory() -> SequentialIdFactory:
    """Predictable ticket record ids: rec-1, rec-2, ..."""
    return SequentialIdFactory()


# =============================================================================
# Catalog Fixtures
# =============================================================================


@pytest.fixture
def gala_dinner() -> TicketDefinition:
    """$150 gala dinner ticket with plenty of seats left"""
    return TicketDefinition(
        ticket_id="et_123",
        event_id="evt_456",
        function_id="fn_001",
        name="Gala Dinner",
        price=Decimal("150.00"),
        total_capacity=500,
        available_count=125,
        event_title="Grand Installation Gala Dinner",
    )


@pytest.fixture
def ceremony() -> TicketDefinition:
    """$50 ceremony ticket that is nearly sold out"""
    return TicketDefinition(
        ticket_id="et_200",
        event_id="evt_200",
        function_id="fn_001",
        name="Installation Ceremony",
        price=Decimal("50.00"),
        total_capacity=300,
        available_count=8,
        eligible_attendee_types=("mason",),
    )


@pytest.fixture
def brunch() -> TicketDefinition:
    """Sold-out farewell brunch"""
    return TicketDefinition(
        ticket_id="et_300",
        event_id="evt_300",
        function_id="fn_001",
        name="Farewell Brunch",
        price=Decimal("45.00"),
        total_capacity=80,
        available_count=0,
    )


@pytest.fixture
def weekend_package() -> PackageDefinition:
    """Full Weekend Package: $180 (discounted from $200), includes the gala dinner"""
    return PackageDefinition(
        package_id="pkg_789",
        function_id="fn_001",
        name="Full Weekend Package",
        price=Decimal("180.00"),
        original_price=Decimal("200.00"),
        discount=Decimal("20.00"),
        included_ticket_ids=("et_123",),
        includes_description=("Gala Dinner",),
    )


@pytest.fixture
def dinner_and_ceremony() -> PackageDefinition:
    """Two-ticket package used to check expansion counts"""
    return PackageDefinition(
        package_id="pkg_duo",
        function_id="fn_001",
        name="Dinner and Ceremony",
        price=Decimal("190.00"),
        included_ticket_ids=("et_123", "et_200"),
    )


@pytest.fixture
def lodge_table() -> PackageDefinition:
    """
    Lodge table of ten at $1950

    Fun fact: a table package includes one ticket id but seats ten - the
    items_per_package count is what a bulk purchase multiplies.
    """
    return PackageDefinition(
        package_id="pkg_table",
        function_id="fn_001",
        name="Lodge Table Package",
        price=Decimal("1950.00"),
        included_ticket_ids=("et_123",),
        includes_description=("Gala Dinner seat",),
        items_per_package=10,
        eligible_registration_types=("lodge",),
    )


@pytest.fixture
def catalog(
    gala_dinner: TicketDefinition,
    ceremony: TicketDefinition,
    brunch: TicketDefinition,
    weekend_package: PackageDefinition,
    dinner_and_ceremony: PackageDefinition,
    lodge_table: PackageDefinition,
) -> Catalog:
    """Captured catalog for function fn_001"""
    return Catalog.capture(
        "fn_001",
        [gala_dinner, ceremony, brunch],
        [weekend_package, dinner_and_ceremony, lodge_table],
    )


# =============================================================================
# Selection Fixtures
# =============================================================================


@pytest.fixture
def individuals_state() -> SelectionState:
    """Empty individuals registration"""
    return SelectionState(function_id="fn_001", registration_type=RegistrationMode.INDIVIDUALS)


@pytest.fixture
def lodge_state() -> SelectionState:
    """Empty lodge registration"""
    return SelectionState(function_id="fn_001", registration_type=RegistrationMode.LODGE)


@pytest.fixture
def session(
    catalog: Catalog,
    policy: EnginePolicy,
    test_time: TestTimeProvider,
    id_factory: SequentialIdFactory,
) -> RegistrationSession:
    """Registration session over the sample catalog, no registration type yet"""
    return RegistrationSession(
        "fn_001",
        catalog,
        policy=policy,
        time_provider=test_time,
        id_factory=id_factory,
        draft_id="draft_1736942400000_abc1234",
    )
