"""Pydantic v2 schemas for inventory and availability endpoints."""

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketplace.errors import ValidationError
from marketplace.inventory.calendar import normalize_date


class InventoryEntryIn(BaseModel):
    """One night of availability as sent by a provider.

    ``date`` may be a plain ISO date or a full timestamp; it is reduced to
    its UTC calendar day.
    """

    date: datetime.date
    available: bool

    @field_validator("date", mode="before")
    @classmethod
    def _normalize(cls, value):
        try:
            return normalize_date(value)
        except ValidationError as e:
            raise ValueError(e.message) from None


class InventoryEntryResponse(BaseModel):
    date: datetime.date
    available: bool

    model_config = ConfigDict(from_attributes=True)


class InventoryReplace(BaseModel):
    """Full replacement list for a property's inventory."""

    inventory: list[InventoryEntryIn] = Field(default_factory=list)

    @field_validator("inventory")
    @classmethod
    def _unique_dates(cls, entries: list[InventoryEntryIn]) -> list[InventoryEntryIn]:
        seen: set[datetime.date] = set()
        for entry in entries:
            if entry.date in seen:
                raise ValueError(f"Duplicate inventory entry for {entry.date.isoformat()}")
            seen.add(entry.date)
        return entries


class InventoryResponse(BaseModel):
    inventory: list[InventoryEntryResponse]


class AvailabilityResponse(BaseModel):
    """Result of checking a stay against current inventory."""

    ok: bool
    unavailable_dates: list[datetime.date]
