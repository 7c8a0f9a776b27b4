"""Test configuration and fixtures."""

import asyncio
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from seating.availability_main import create_availability_app
from seating.clients.availability_client import AvailabilityClient
from seating.core.exceptions import UpstreamUnavailableError
from seating.core.seed import seed_reservations, seed_tables, seed_waitlists
from seating.main import create_app
from seating.models.table import Table
from seating.services.availability_service import InMemoryAvailabilityStore
from seating.services.reservation_coordinator import ReservationCoordinator
from seating.services.reservation_store import ReservationStore


class ControllableAvailabilityStore:
    """
    Wraps an in-memory table store so tests can count, slow down or fail upstream calls.

    Operations named in ``fail_operations`` raise UpstreamUnavailableError and
    those in ``hang_operations`` never return.
    """

    def __init__(self, inner: InMemoryAvailabilityStore, delay: float = 0.0):
        self.inner = inner
        self.delay = delay
        self.fail_operations: set[str] = set()
        self.hang_operations: set[str] = set()
        self.calls: list[tuple] = []

    async def get_table(self, table_id: str) -> Table:
        await self._before("get_table", table_id)
        return await self.inner.get_table(table_id)

    async def set_table_availability(self, table_id: str, available: bool) -> Table:
        await self._before("set_table_availability", table_id, available)
        return await self.inner.set_table_availability(table_id, available)

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    async def _before(self, operation: str, *args) -> None:
        self.calls.append((operation, *args))
        if self.delay:
            await asyncio.sleep(self.delay)
        if operation in self.hang_operations:
            await asyncio.Event().wait()
        if operation in self.fail_operations:
            raise UpstreamUnavailableError(operation=operation, cause="injected failure")


@pytest.fixture
def table_store() -> InMemoryAvailabilityStore:
    """Availability store holding the demo tables (T001 and T003 start available)."""
    return InMemoryAvailabilityStore(seed_tables())


@pytest.fixture
def reservation_store() -> ReservationStore:
    """Coordinator state matching the demo tables: T002 and T004 held as R1 and R2, C101-C103 waiting on T002."""
    return ReservationStore(waitlists=seed_waitlists(), reservations=seed_reservations())


@pytest.fixture
def upstream(table_store) -> ControllableAvailabilityStore:
    return ControllableAvailabilityStore(table_store)


@pytest.fixture
def coordinator(upstream, reservation_store) -> ReservationCoordinator:
    return ReservationCoordinator(
        availability=upstream,
        store=reservation_store,
        upstream_timeout=0.5,
    )


def _make_coordinator(
    tables: Optional[list[Table]] = None,
    delay: float = 0.0,
) -> tuple[ReservationCoordinator, ControllableAvailabilityStore]:
    """Build a coordinator with an empty local state over the given tables."""
    store = ControllableAvailabilityStore(
        InMemoryAvailabilityStore(tables if tables is not None else seed_tables()),
        delay=delay,
    )
    return ReservationCoordinator(availability=store, store=ReservationStore()), store


@pytest.fixture
def coordinator_factory():
    """Build coordinators with empty local state over a fresh set of tables."""
    return _make_coordinator


@pytest.fixture
def availability_app(table_store):
    """Availability store application serving ``table_store``."""
    return create_availability_app(store=table_store)


@pytest_asyncio.fixture
async def availability_client(availability_app):
    """HTTP client wired in-process to the availability store application."""
    client = AvailabilityClient(
        base_url="http://availability",
        timeout=2.0,
        transport=ASGITransport(app=availability_app),
    )
    yield client
    await client.aclose()


@pytest.fixture
def coordinator_app(availability_client, reservation_store):
    """Coordinator application talking to the real availability app over HTTP."""
    coordinator = ReservationCoordinator(
        availability=availability_client,
        store=reservation_store,
        upstream_timeout=2.0,
    )
    return create_app(coordinator=coordinator)


@pytest_asyncio.fixture
async def test_client(coordinator_app):
    """HTTP client for the coordinator application."""
    transport = ASGITransport(app=coordinator_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def availability_test_client(availability_app):
    """HTTP client for the availability store application."""
    transport = ASGITransport(app=availability_app)
    async with AsyncClient(transport=transport, base_url="http://availability") as client:
        yield client


@pytest.fixture
def reserve_payload():
    """Build a reservation request body."""
    def _payload(table_id: str, customer_id: str, reservation_type: str = "reserve", preferences=None):
        body = {
            "tableId": table_id,
            "customerId": customer_id,
            "reservationType": reservation_type,
        }
        if preferences is not None:
            body["preferences"] = preferences
        return body
    return _payload
