"""Waitlist router for inspecting table queues."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.dependencies import get_coordinator
from ..schemas.reservation import WaitlistEntry, WaitlistResponse
from ..services.reservation_coordinator import ReservationCoordinator

router = APIRouter(prefix="/v1/waitlist", tags=["waitlist"])


@router.get("/{table_id}", response_model=WaitlistResponse)
async def get_waitlist(
    table_id: str,
    coordinator: ReservationCoordinator = Depends(get_coordinator),
) -> JSONResponse:
    """
    Return a table's waitlist in promotion order.

    An unknown table or one nobody is waiting for returns an empty list.
    """
    response_data = WaitlistResponse(
        table_id=table_id,
        entries=[
            WaitlistEntry(position=index, customer_id=entry.customer_id, preferences=entry.preferences)
            for index, entry in enumerate(coordinator.get_waitlist(table_id), start=1)
        ],
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(by_alias=True))
