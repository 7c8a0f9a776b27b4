"""Reconciliation router for cancellations whose table release failed."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.dependencies import get_coordinator
from ..schemas.reservation import ReconciliationEntry, ReconciliationRetryResponse
from ..services.reservation_coordinator import ReservationCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/reconciliations", tags=["reconciliation"])

COORDINATOR_DEPENDENCY = Depends(get_coordinator)


@router.get("", response_model=list[ReconciliationEntry])
async def list_reconciliations(
    coordinator: ReservationCoordinator = COORDINATOR_DEPENDENCY,
) -> JSONResponse:
    """List cancellations still waiting for their table to be released upstream."""
    entries = [
        ReconciliationEntry(
            table_id=item.table_id,
            reservation_id=item.reservation_id,
            customer_id=item.customer_id,
            cause=item.cause,
            recorded_at=item.recorded_at,
        ).model_dump(mode="json", by_alias=True)
        for item in coordinator.list_reconciliations()
    ]
    return JSONResponse(status_code=200, content=entries)


@router.post("/{table_id}/retry", response_model=ReconciliationRetryResponse)
async def retry_reconciliation(
    table_id: str,
    coordinator: ReservationCoordinator = COORDINATOR_DEPENDENCY,
) -> JSONResponse:
    """
    Retry a pending reconciliation (operator action).

    Fails with 404 when nothing is pending and with 502 when the
    availability store is still unreachable.
    """
    result = await coordinator.retry_reconciliation(table_id)

    response_data = ReconciliationRetryResponse(
        table_id=table_id,
        resolution=result.resolution.value,
        reservation_id=result.reservation.reservation_id if result.reservation else None,
        customer_id=result.reservation.customer_id if result.reservation else None,
    )

    logger.info(
        "Reconciliation retried",
        extra={
            "table_id": table_id,
            "cancelled_reservation_id": result.item.reservation_id,
            "resolution": result.resolution.value,
        }
    )

    return JSONResponse(status_code=200, content=response_data.model_dump(by_alias=True))
