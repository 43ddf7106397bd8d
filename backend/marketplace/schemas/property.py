"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from marketplace.schemas.inventory import InventoryEntryIn, InventoryEntryResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a listing. The owner is always the caller."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    price_per_night: Decimal = Field(..., ge=0)
    images: list[str] = Field(default_factory=list)
    inventory: list[InventoryEntryIn] = Field(default_factory=list)


class PropertyUpdate(BaseModel):
    """Schema for partially updating a listing.

    Ownership and inventory are not editable here; inventory has its own
    endpoint.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price_per_night: Decimal | None = Field(None, ge=0)
    images: list[str] | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Public listing information."""

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str | None = None
    price_per_night: Decimal
    images: list[str] = []
    inventory: list[InventoryEntryResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    """Paginated list of properties."""

    items: list[PropertyResponse]
    total: int
