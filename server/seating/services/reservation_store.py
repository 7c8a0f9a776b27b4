"""In-memory state owned by the reservation coordinator."""

import itertools
import logging
from collections import deque
from typing import Iterable, Mapping, Optional

from ..models.reservation import ReconciliationItem, Reservation, WaitlistEntry

logger = logging.getLogger(__name__)


class ReservationStore:
    """
    Active reservations, per-table waitlists and pending reconciliations.

    Only the reservation coordinator mutates this object, and only while it
    holds the lock for the table being changed. Reservation IDs come from a
    counter that never goes backwards, so an ID is never handed out twice even
    after the reservation that used it is cancelled.
    """

    def __init__(
        self,
        waitlists: Optional[Mapping[str, Iterable[WaitlistEntry]]] = None,
        reservations: Optional[Mapping[str, str]] = None,
    ):
        self._reservations: dict[str, Reservation] = {}
        self._waitlists: dict[str, deque[WaitlistEntry]] = {}
        self._reconciliations: dict[str, ReconciliationItem] = {}
        self._id_counter = itertools.count(1)

        for table_id, customer_id in (reservations or {}).items():
            self.create_reservation(table_id, customer_id)

        for table_id, entries in (waitlists or {}).items():
            queue = deque(
                WaitlistEntry(customer_id=entry.customer_id, preferences=list(entry.preferences))
                for entry in entries
            )
            if queue:
                self._waitlists[table_id] = queue

    # Reservations

    def next_reservation_id(self) -> str:
        return f"R{next(self._id_counter)}"

    def create_reservation(self, table_id: str, customer_id: str) -> Reservation:
        reservation = Reservation(
            reservation_id=self.next_reservation_id(),
            table_id=table_id,
            customer_id=customer_id,
        )
        self._reservations[reservation.reservation_id] = reservation
        return reservation

    def find_reservation(self, table_id: str, customer_id: str) -> Optional[Reservation]:
        for reservation in self._reservations.values():
            if reservation.table_id == table_id and reservation.customer_id == customer_id:
                return reservation
        return None

    def find_reservation_for_table(self, table_id: str) -> Optional[Reservation]:
        for reservation in self._reservations.values():
            if reservation.table_id == table_id:
                return reservation
        return None

    def remove_reservation(self, reservation_id: str) -> Reservation:
        return self._reservations.pop(reservation_id)

    def list_reservations(self, table_id: Optional[str] = None) -> list[Reservation]:
        return [
            reservation
            for reservation in self._reservations.values()
            if table_id is None or reservation.table_id == table_id
        ]

    # Waitlists

    def enqueue(self, table_id: str, entry: WaitlistEntry) -> int:
        """Append ``entry`` to the table's queue and return its 1-based position."""
        queue = self._waitlists.setdefault(table_id, deque())
        queue.append(entry)
        return len(queue)

    def pop_waitlist_head(self, table_id: str) -> Optional[WaitlistEntry]:
        queue = self._waitlists.get(table_id)
        if not queue:
            return None
        entry = queue.popleft()
        if not queue:
            del self._waitlists[table_id]
        return entry

    def remove_from_waitlist(self, table_id: str, customer_id: str) -> bool:
        """Remove the first entry for ``customer_id``; return False if there was none."""
        queue = self._waitlists.get(table_id)
        if not queue:
            return False
        for entry in queue:
            if entry.customer_id == customer_id:
                queue.remove(entry)
                if not queue:
                    del self._waitlists[table_id]
                return True
        return False

    def get_waitlist(self, table_id: str) -> list[WaitlistEntry]:
        return list(self._waitlists.get(table_id, ()))

    def waitlist_length(self, table_id: str) -> int:
        return len(self._waitlists.get(table_id, ()))

    # Reconciliation

    def record_reconciliation(self, item: ReconciliationItem) -> None:
        """Record ``item`` as the table's pending release, replacing any earlier one."""
        previous = self._reconciliations.get(item.table_id)
        if previous is not None:
            logger.warning(
                "Superseding pending reconciliation",
                extra={
                    "table_id": item.table_id,
                    "superseded_reservation_id": previous.reservation_id,
                    "superseded_cause": previous.cause,
                    "reservation_id": item.reservation_id,
                }
            )
        self._reconciliations[item.table_id] = item

    def get_reconciliation(self, table_id: str) -> Optional[ReconciliationItem]:
        return self._reconciliations.get(table_id)

    def pop_reconciliation(self, table_id: str) -> Optional[ReconciliationItem]:
        return self._reconciliations.pop(table_id, None)

    def list_reconciliations(self) -> list[ReconciliationItem]:
        return list(self._reconciliations.values())
