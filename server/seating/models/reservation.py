"""Reservation, waitlist and outcome model definitions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ReservationType(str, Enum):
    """Kinds of reservation request."""
    RESERVE = "reserve"
    CANCEL = "cancel"


class ReservationStatus(str, Enum):
    """Reservation status enumeration."""
    CONFIRMED = "confirmed"


@dataclass
class Reservation:
    """A confirmed booking linking one customer to one table."""

    reservation_id: str
    table_id: str
    customer_id: str
    status: ReservationStatus = ReservationStatus.CONFIRMED

    def __repr__(self) -> str:
        return (
            f"<Reservation(reservation_id='{self.reservation_id}', table_id='{self.table_id}', "
            f"customer_id='{self.customer_id}', status={self.status.value})>"
        )


@dataclass
class WaitlistEntry:
    """
    A customer waiting for a table.

    Preferences are kept for display only; promotion order is arrival order.
    """

    customer_id: str
    preferences: list[str] = field(default_factory=list)


@dataclass
class ReconciliationItem:
    """A cancelled reservation whose table release never reached the availability store."""

    table_id: str
    reservation_id: str
    customer_id: str
    cause: str
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class OutcomeKind(str, Enum):
    """Result of processing one reservation request."""
    CONFIRMED = "confirmed"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"
    CANCELLED_WITH_PROMOTION = "cancelled_with_promotion"
    REMOVED_FROM_WAITLIST = "removed_from_waitlist"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ReservationOutcome:
    """Structured outcome of a reserve or cancel request."""

    kind: OutcomeKind
    table_id: str
    customer_id: str
    reservation_id: Optional[str] = None
    queue_position: Optional[int] = None
    promoted_customer_id: Optional[str] = None
    promoted_reservation_id: Optional[str] = None

    @property
    def message(self) -> str:
        if self.kind is OutcomeKind.CONFIRMED:
            return f"Reservation {self.reservation_id} confirmed for table {self.table_id}."
        if self.kind is OutcomeKind.WAITLISTED:
            return f"You are #{self.queue_position} in the queue."
        if self.kind is OutcomeKind.CANCELLED:
            return "Reservation cancelled and table is now available."
        if self.kind is OutcomeKind.CANCELLED_WITH_PROMOTION:
            return (
                f"Reservation cancelled. Customer {self.promoted_customer_id} has been "
                f"confirmed from the waitlist as {self.promoted_reservation_id}."
            )
        if self.kind is OutcomeKind.REMOVED_FROM_WAITLIST:
            return "Removed from waitlist."
        return "Reservation not found for cancellation"


class ReconciliationResolution(str, Enum):
    """How a pending reconciliation was closed."""
    RELEASED = "released"
    PROMOTED = "promoted"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class ReconciliationResult:
    """A reconciliation item that is no longer pending, and how it was closed."""

    item: ReconciliationItem
    resolution: ReconciliationResolution
    reservation: Optional[Reservation] = None
