"""FastAPI dependencies for the objects each application builds at startup."""

from fastapi import Request

from ..services.availability_service import InMemoryAvailabilityStore
from ..services.reservation_coordinator import ReservationCoordinator


def get_coordinator(request: Request) -> ReservationCoordinator:
    """Return the reservation coordinator attached to the running application."""
    return request.app.state.coordinator


def get_table_store(request: Request) -> InMemoryAvailabilityStore:
    """Return the table store attached to the availability application."""
    return request.app.state.table_store
