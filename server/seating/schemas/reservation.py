"""Reservation-related Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "ReconciliationEntry",
    "ReconciliationRetryResponse",
    "ReservationRecord",
    "ReservationRequest",
    "ReservationResponse",
    "ReservationResponseStatus",
    "WaitlistEntry",
    "WaitlistResponse",
]


class ReservationResponseStatus(str, Enum):
    """Status reported back to the client."""
    SUCCESS = "success"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"


class ReservationRequest(BaseModel):
    """
    Request schema for reserving or cancelling a table.

    ``reservationType`` is checked by the coordinator rather than here so an
    unknown value is reported as a validation error of the request itself.
    """

    model_config = ConfigDict(populate_by_name=True)

    table_id: str = Field(..., alias="tableId", min_length=1, description="Table to reserve or cancel")
    customer_id: str = Field(..., alias="customerId", min_length=1, description="Customer making the request")
    reservation_type: str = Field(..., alias="reservationType", description="'reserve' or 'cancel'")
    preferences: Optional[list[str]] = Field(
        None, description="Seating preferences, informational only"
    )


class ReservationResponse(BaseModel):
    """Response schema for a processed reservation request."""

    model_config = ConfigDict(populate_by_name=True)

    reservation_id: Optional[str] = Field(None, alias="reservationId")
    status: ReservationResponseStatus
    table_id: Optional[str] = Field(None, alias="tableId")
    message: Optional[str] = None
    waitlist_message: Optional[str] = Field(None, alias="waitlistMessage")


class ReservationRecord(BaseModel):
    """An active reservation."""

    model_config = ConfigDict(populate_by_name=True)

    reservation_id: str = Field(..., alias="reservationId")
    table_id: str = Field(..., alias="tableId")
    customer_id: str = Field(..., alias="customerId")
    status: str


class WaitlistEntry(BaseModel):
    """A waitlisted customer and their place in the queue."""

    model_config = ConfigDict(populate_by_name=True)

    position: int = Field(..., ge=1)
    customer_id: str = Field(..., alias="customerId")
    preferences: list[str] = Field(default_factory=list)


class WaitlistResponse(BaseModel):
    """A table's waitlist in promotion order."""

    model_config = ConfigDict(populate_by_name=True)

    table_id: str = Field(..., alias="tableId")
    entries: list[WaitlistEntry] = Field(default_factory=list)


class ReconciliationEntry(BaseModel):
    """A cancelled reservation whose table release is still pending."""

    model_config = ConfigDict(populate_by_name=True)

    table_id: str = Field(..., alias="tableId")
    reservation_id: str = Field(..., alias="reservationId")
    customer_id: str = Field(..., alias="customerId")
    cause: str
    recorded_at: datetime = Field(..., alias="recordedAt")


class ReconciliationRetryResponse(BaseModel):
    """Result of retrying a pending reconciliation."""

    model_config = ConfigDict(populate_by_name=True)

    table_id: str = Field(..., alias="tableId")
    resolution: str
    reservation_id: Optional[str] = Field(None, alias="reservationId")
    customer_id: Optional[str] = Field(None, alias="customerId")
