"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from marketplace.errors import ValidationError
from marketplace.inventory.calendar import normalize_date

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class StayRequest(BaseModel):
    """A guest's requested stay at a property."""

    property_id: uuid.UUID
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: str = Field(..., min_length=1, max_length=255)
    check_in: date
    check_out: date

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def _normalize(cls, value):
        try:
            return normalize_date(value)
        except ValidationError as e:
            raise ValueError(e.message) from None

    @model_validator(mode="after")
    def check_dates(self) -> "StayRequest":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingCreate(StayRequest):
    """Schema for booking a stay directly, without online payment."""


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_name: str
    guest_email: str
    check_in: date
    check_out: date
    status: str
    total_price: Decimal | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingCreatedResponse(BaseModel):
    """Returned from booking creation.

    ``email_sent`` is false when the booking was recorded but the
    confirmation email could not be delivered.
    """

    message: str
    booking: BookingResponse
    email_sent: bool


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int
