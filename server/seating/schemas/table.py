"""Table-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field, StrictBool

__all__ = ["Table", "UpdateAvailabilityRequest"]


class Table(BaseModel):
    """Table record as served by the availability store."""

    model_config = ConfigDict(populate_by_name=True)

    table_id: str = Field(..., alias="tableId", description="Unique table ID")
    capacity: int = Field(..., ge=1, description="Number of seats")
    location: str = Field(..., description="Where the table sits, e.g. Window")
    available: bool = Field(..., description="Whether the table can be reserved")


class UpdateAvailabilityRequest(BaseModel):
    """Request schema for setting a table's availability."""

    available: StrictBool = Field(..., description="New availability flag")
