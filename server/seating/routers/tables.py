"""Tables router for the availability store service."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.dependencies import get_table_store
from ..models.table import Table as TableModel
from ..schemas.table import Table, UpdateAvailabilityRequest
from ..services.availability_service import InMemoryAvailabilityStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tables", tags=["tables"])

TABLE_STORE_DEPENDENCY = Depends(get_table_store)


def _convert_table_to_schema(table: TableModel) -> Table:
    """Convert table model to schema."""
    return Table(
        table_id=table.table_id,
        capacity=table.capacity,
        location=table.location,
        available=table.available,
    )


@router.get("", response_model=list[Table])
async def list_tables(store: InMemoryAvailabilityStore = TABLE_STORE_DEPENDENCY) -> JSONResponse:
    """List every table with its availability."""
    tables = await store.list_tables()
    return JSONResponse(
        status_code=200,
        content=[_convert_table_to_schema(table).model_dump(by_alias=True) for table in tables]
    )


@router.get("/{table_id}", response_model=Table)
async def get_table(
    table_id: str,
    store: InMemoryAvailabilityStore = TABLE_STORE_DEPENDENCY,
) -> JSONResponse:
    """Return the details of one table; 404 if it does not exist."""
    table = await store.get_table(table_id)
    return JSONResponse(
        status_code=200,
        content=_convert_table_to_schema(table).model_dump(by_alias=True)
    )


@router.put("/{table_id}", response_model=Table)
async def update_table_availability(
    table_id: str,
    request: UpdateAvailabilityRequest,
    store: InMemoryAvailabilityStore = TABLE_STORE_DEPENDENCY,
) -> JSONResponse:
    """
    Set a table's availability flag.

    Setting the value it already has is a no-op that still returns the table.
    """
    table = await store.set_table_availability(table_id, request.available)
    return JSONResponse(
        status_code=200,
        content=_convert_table_to_schema(table).model_dump(by_alias=True)
    )
