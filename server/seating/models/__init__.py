"""Domain records held by the availability store and the reservation coordinator."""

from .reservation import (
    OutcomeKind,
    ReconciliationItem,
    ReconciliationResolution,
    ReconciliationResult,
    Reservation,
    ReservationOutcome,
    ReservationStatus,
    ReservationType,
    WaitlistEntry,
)
from .table import Table

__all__ = [
    "OutcomeKind",
    "ReconciliationItem",
    "ReconciliationResolution",
    "ReconciliationResult",
    "Reservation",
    "ReservationOutcome",
    "ReservationStatus",
    "ReservationType",
    "Table",
    "WaitlistEntry",
]
