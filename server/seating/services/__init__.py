"""Service layer package."""

from .availability_service import AvailabilityStore, InMemoryAvailabilityStore
from .reservation_coordinator import ReservationCoordinator
from .reservation_store import ReservationStore

__all__ = [
    "AvailabilityStore",
    "InMemoryAvailabilityStore",
    "ReservationCoordinator",
    "ReservationStore",
]
