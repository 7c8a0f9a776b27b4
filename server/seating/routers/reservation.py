"""Reservation router for reserve and cancel requests."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from ..core.dependencies import get_coordinator
from ..core.exceptions import NotFoundError, ProblemDetailsException
from ..models.reservation import OutcomeKind, ReservationOutcome
from ..schemas.reservation import (
    ReservationRecord,
    ReservationRequest,
    ReservationResponse,
    ReservationResponseStatus,
)
from ..services.reservation_coordinator import ReservationCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/reservations", tags=["reservations"])

COORDINATOR_DEPENDENCY = Depends(get_coordinator)


def _convert_outcome_to_schema(outcome: ReservationOutcome) -> ReservationResponse:
    """Convert a coordinator outcome to the response shape the client expects."""
    if outcome.kind is OutcomeKind.CONFIRMED:
        return ReservationResponse(
            reservation_id=outcome.reservation_id,
            status=ReservationResponseStatus.SUCCESS,
            table_id=outcome.table_id,
        )

    if outcome.kind is OutcomeKind.WAITLISTED:
        return ReservationResponse(
            reservation_id=None,
            status=ReservationResponseStatus.WAITLISTED,
            waitlist_message=outcome.message,
        )

    return ReservationResponse(
        reservation_id=outcome.reservation_id,
        status=ReservationResponseStatus.CANCELLED,
        table_id=outcome.table_id,
        message=outcome.message,
    )


@router.post("", response_model=ReservationResponse)
async def process_reservation(
    request: ReservationRequest,
    coordinator: ReservationCoordinator = COORDINATOR_DEPENDENCY,
) -> JSONResponse:
    """
    Reserve a table or cancel a reservation.

    Reserving an available table confirms it; reserving a taken table joins its
    waitlist. Cancelling a reservation hands the table to the head of the
    waitlist, or releases it when nobody is waiting. Cancelling without a
    reservation removes the customer from the waitlist.
    """
    try:
        outcome = await coordinator.process_request(request)
    except ProblemDetailsException:
        raise
    except Exception as e:
        logger.error(
            "Unexpected error processing reservation request",
            extra={
                "table_id": request.table_id,
                "customer_id": request.customer_id,
                "reservation_type": request.reservation_type,
                "error": str(e),
            },
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Reservation processing failed"
        ) from e

    if outcome.kind is OutcomeKind.NOT_FOUND:
        raise NotFoundError(
            resource_type="reservation",
            detail=outcome.message,
        )

    response_data = _convert_outcome_to_schema(outcome)

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json", by_alias=True, exclude_unset=True)
    )


@router.get("", response_model=list[ReservationRecord])
async def list_reservations(
    table_id: Optional[str] = Query(None, alias="tableId"),
    coordinator: ReservationCoordinator = COORDINATOR_DEPENDENCY,
) -> JSONResponse:
    """List active reservations, optionally for one table."""
    records = [
        ReservationRecord(
            reservation_id=reservation.reservation_id,
            table_id=reservation.table_id,
            customer_id=reservation.customer_id,
            status=reservation.status.value,
        ).model_dump(by_alias=True)
        for reservation in coordinator.list_reservations(table_id)
    ]
    return JSONResponse(status_code=200, content=records)
