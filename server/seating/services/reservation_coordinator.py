"""Reservation coordinator: reserve, cancel and waitlist promotion."""

import asyncio
import logging
from typing import Awaitable, Optional, Sequence, TypeVar

from ..core.exceptions import (
    NotFoundError,
    ReconciliationRequiredError,
    TableNotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from ..core.locks import KeyedLock
from ..core.observability import get_logger, metrics_collector
from ..models.reservation import (
    OutcomeKind,
    ReconciliationItem,
    ReconciliationResolution,
    ReconciliationResult,
    Reservation,
    ReservationOutcome,
    ReservationType,
    WaitlistEntry,
)
from ..models.table import Table
from ..schemas.reservation import ReservationRequest
from .availability_service import AvailabilityStore
from .reservation_store import ReservationStore

logger = logging.getLogger(__name__)
audit_logger = get_logger(__name__)

T = TypeVar("T")


class ReservationCoordinator:
    """
    Decides reservation outcomes against remote table availability.

    Every request for a table runs its read-decide-write sequence under that
    table's lock, so two reserves can never both see the table as available.
    Requests for different tables do not wait on each other.
    """

    def __init__(
        self,
        availability: AvailabilityStore,
        store: ReservationStore,
        locks: Optional[KeyedLock] = None,
        upstream_timeout: float = 5.0,
    ):
        self.availability = availability
        self.store = store
        self.locks = locks or KeyedLock()
        self.upstream_timeout = upstream_timeout

    async def process_request(self, request: ReservationRequest) -> ReservationOutcome:
        """
        Process a reservation or cancellation request.

        Args:
            request: Table, customer, request type and optional preferences

        Returns:
            Outcome describing what changed

        Raises:
            ValidationError: If the reservation type is not recognised
            TableNotFoundError: If the availability store has no such table
            UpstreamUnavailableError: If the availability store failed or timed out
            ReconciliationRequiredError: If a cancellation could not release the table
        """
        kind = self._parse_reservation_type(request.reservation_type)

        async with self.locks.acquire(request.table_id):
            table = await self._get_table(request.table_id)
            if table.table_id != request.table_id:
                # Locks are keyed on the requested id, so it must name the table served
                logger.warning(
                    "Table id resolved to a different table",
                    extra={"requested": request.table_id, "resolved": table.table_id}
                )
                raise TableNotFoundError(request.table_id)

            if kind is ReservationType.RESERVE:
                return await self._reserve(table, request.customer_id, request.preferences)
            return await self._cancel(table, request.customer_id)

    async def retry_reconciliation(self, table_id: str) -> ReconciliationResult:
        """
        Bring the availability store back in line after a failed table release.

        If the table has been taken again in the meantime the item is simply
        dropped. If customers joined the waitlist, the head is promoted and the
        table stays unavailable. Otherwise the release is written again.

        Raises:
            NotFoundError: If nothing is pending for the table
            UpstreamUnavailableError: If the release failed again; the item stays pending
        """
        async with self.locks.acquire(table_id):
            item = self.store.get_reconciliation(table_id)
            if item is None:
                raise NotFoundError(resource_type="reconciliation", resource_id=table_id)

            log = audit_logger.with_context(table_id=table_id, reservation_id=item.reservation_id)

            holder = self.store.find_reservation_for_table(table_id)
            if holder is not None:
                self._resolve_reconciliation(table_id)
                log.info("reconciliation_superseded", holder=holder.reservation_id)
                return ReconciliationResult(
                    item=item, resolution=ReconciliationResolution.SUPERSEDED, reservation=holder
                )

            promoted = self._promote_head(table_id)
            if promoted is not None:
                self._resolve_reconciliation(table_id)
                log.info("reconciliation_promoted", promoted=promoted.reservation_id)
                return ReconciliationResult(
                    item=item, resolution=ReconciliationResolution.PROMOTED, reservation=promoted
                )

            await self._set_availability(table_id, True)
            self._resolve_reconciliation(table_id)
            log.info("reconciliation_released")
            return ReconciliationResult(item=item, resolution=ReconciliationResolution.RELEASED)

    def list_reservations(self, table_id: Optional[str] = None) -> list[Reservation]:
        return self.store.list_reservations(table_id)

    def get_waitlist(self, table_id: str) -> list[WaitlistEntry]:
        return self.store.get_waitlist(table_id)

    def list_reconciliations(self) -> list[ReconciliationItem]:
        return self.store.list_reconciliations()

    async def _reserve(
        self, table: Table, customer_id: str, preferences: Optional[Sequence[str]]
    ) -> ReservationOutcome:
        table_id = table.table_id

        if table.available:
            await self._set_availability(table_id, False)
            reservation = self.store.create_reservation(table_id, customer_id)
            metrics_collector.record_reservation_confirmed(table_id)

            logger.info(
                "Reservation confirmed",
                extra={
                    "reservation_id": reservation.reservation_id,
                    "table_id": table_id,
                    "customer_id": customer_id,
                }
            )

            return ReservationOutcome(
                kind=OutcomeKind.CONFIRMED,
                table_id=table_id,
                customer_id=customer_id,
                reservation_id=reservation.reservation_id,
            )

        position = self.store.enqueue(
            table_id, WaitlistEntry(customer_id=customer_id, preferences=list(preferences or []))
        )
        metrics_collector.record_waitlist_joined(table_id)
        metrics_collector.set_waitlist_length(table_id, position)

        logger.info(
            "Customer added to waitlist",
            extra={
                "table_id": table_id,
                "customer_id": customer_id,
                "position": position,
            }
        )

        return ReservationOutcome(
            kind=OutcomeKind.WAITLISTED,
            table_id=table_id,
            customer_id=customer_id,
            queue_position=position,
        )

    async def _cancel(self, table: Table, customer_id: str) -> ReservationOutcome:
        table_id = table.table_id

        reservation = self.store.find_reservation(table_id, customer_id)
        if reservation is None:
            return self._leave_waitlist(table_id, customer_id)

        self.store.remove_reservation(reservation.reservation_id)
        metrics_collector.record_reservation_cancelled(table_id)

        # The seat passes straight to the next customer; the table never shows as free
        promoted = self._promote_head(table_id)
        if promoted is not None:
            logger.info(
                "Reservation cancelled and waitlist head promoted",
                extra={
                    "reservation_id": reservation.reservation_id,
                    "table_id": table_id,
                    "promoted_customer_id": promoted.customer_id,
                    "promoted_reservation_id": promoted.reservation_id,
                }
            )
            return ReservationOutcome(
                kind=OutcomeKind.CANCELLED_WITH_PROMOTION,
                table_id=table_id,
                customer_id=customer_id,
                reservation_id=reservation.reservation_id,
                promoted_customer_id=promoted.customer_id,
                promoted_reservation_id=promoted.reservation_id,
            )

        try:
            await self._set_availability(table_id, True)
        except UpstreamUnavailableError as exc:
            self.store.record_reconciliation(
                ReconciliationItem(
                    table_id=table_id,
                    reservation_id=reservation.reservation_id,
                    customer_id=customer_id,
                    cause=exc.cause,
                )
            )
            metrics_collector.set_reconciliations_pending(len(self.store.list_reconciliations()))
            audit_logger.with_context(
                table_id=table_id, reservation_id=reservation.reservation_id
            ).error("table_release_failed", cause=exc.cause)
            raise ReconciliationRequiredError(
                table_id=table_id,
                reservation_id=reservation.reservation_id,
                cause=exc.cause,
            ) from exc

        logger.info(
            "Reservation cancelled and table released",
            extra={
                "reservation_id": reservation.reservation_id,
                "table_id": table_id,
                "customer_id": customer_id,
            }
        )

        return ReservationOutcome(
            kind=OutcomeKind.CANCELLED,
            table_id=table_id,
            customer_id=customer_id,
            reservation_id=reservation.reservation_id,
        )

    def _leave_waitlist(self, table_id: str, customer_id: str) -> ReservationOutcome:
        if self.store.remove_from_waitlist(table_id, customer_id):
            metrics_collector.set_waitlist_length(table_id, self.store.waitlist_length(table_id))
            logger.info(
                "Customer removed from waitlist",
                extra={"table_id": table_id, "customer_id": customer_id}
            )
            return ReservationOutcome(
                kind=OutcomeKind.REMOVED_FROM_WAITLIST,
                table_id=table_id,
                customer_id=customer_id,
            )

        logger.info(
            "Nothing to cancel",
            extra={"table_id": table_id, "customer_id": customer_id}
        )
        return ReservationOutcome(
            kind=OutcomeKind.NOT_FOUND,
            table_id=table_id,
            customer_id=customer_id,
        )

    def _promote_head(self, table_id: str) -> Optional[Reservation]:
        entry = self.store.pop_waitlist_head(table_id)
        if entry is None:
            return None

        promoted = self.store.create_reservation(table_id, entry.customer_id)
        metrics_collector.record_promotion(table_id)
        metrics_collector.set_waitlist_length(table_id, self.store.waitlist_length(table_id))
        return promoted

    def _resolve_reconciliation(self, table_id: str) -> None:
        self.store.pop_reconciliation(table_id)
        metrics_collector.set_reconciliations_pending(len(self.store.list_reconciliations()))

    @staticmethod
    def _parse_reservation_type(value: str) -> ReservationType:
        try:
            return ReservationType(value)
        except ValueError:
            logger.warning("Rejected reservation request", extra={"reservation_type": value})
            raise ValidationError(
                detail="Invalid reservation type",
                violations=[{
                    "path": "reservationType",
                    "message": f"must be one of: {', '.join(t.value for t in ReservationType)}",
                }],
            ) from None

    async def _get_table(self, table_id: str) -> Table:
        return await self._call_upstream("get_table", self.availability.get_table(table_id))

    async def _set_availability(self, table_id: str, available: bool) -> Table:
        return await self._call_upstream(
            "set_table_availability",
            self.availability.set_table_availability(table_id, available),
        )

    async def _call_upstream(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.upstream_timeout)
        except asyncio.TimeoutError:
            metrics_collector.record_upstream_failure(operation)
            logger.error(
                "Availability store call timed out",
                extra={"operation": operation, "timeout_seconds": self.upstream_timeout}
            )
            raise UpstreamUnavailableError(
                operation=operation,
                cause=f"timed out after {self.upstream_timeout}s",
            ) from None
        except UpstreamUnavailableError:
            metrics_collector.record_upstream_failure(operation)
            raise
