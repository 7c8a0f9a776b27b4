"""Property-based tests for reservation invariants."""

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from seating.models.reservation import OutcomeKind
from seating.models.table import Table
from seating.schemas.reservation import ReservationRequest
from seating.services.availability_service import InMemoryAvailabilityStore
from seating.services.reservation_coordinator import ReservationCoordinator
from seating.services.reservation_store import ReservationStore

TABLE_IDS = ["T001", "T002"]

operations = st.lists(
    st.tuples(
        st.sampled_from(["reserve", "cancel"]),
        st.sampled_from(TABLE_IDS),
        st.sampled_from(["C1", "C2", "C3", "C4"]),
    ),
    max_size=40,
)


def run_sequence(steps):
    async def scenario():
        tables = InMemoryAvailabilityStore(
            [Table(table_id, 2, "Window", True) for table_id in TABLE_IDS]
        )
        coordinator = ReservationCoordinator(availability=tables, store=ReservationStore())
        issued = []

        for reservation_type, table_id, customer_id in steps:
            outcome = await coordinator.process_request(
                ReservationRequest(
                    table_id=table_id,
                    customer_id=customer_id,
                    reservation_type=reservation_type,
                )
            )
            if outcome.kind is OutcomeKind.CONFIRMED:
                issued.append(outcome.reservation_id)
            if outcome.promoted_reservation_id:
                issued.append(outcome.promoted_reservation_id)

        availability = {table_id: (await tables.get_table(table_id)).available for table_id in TABLE_IDS}
        return coordinator, availability, issued

    return asyncio.run(scenario())


@settings(max_examples=75, deadline=None)
@given(steps=operations)
def test_availability_matches_holders(steps):
    """A table is unavailable exactly when it has a confirmed reservation."""
    coordinator, availability, _ = run_sequence(steps)

    for table_id in TABLE_IDS:
        holders = coordinator.list_reservations(table_id)
        assert len(holders) <= 1
        assert availability[table_id] is (not holders)
        if not holders:
            assert coordinator.get_waitlist(table_id) == []


@settings(max_examples=75, deadline=None)
@given(steps=operations)
def test_reservation_ids_never_reused(steps):
    _, _, issued = run_sequence(steps)

    assert len(issued) == len(set(issued))
