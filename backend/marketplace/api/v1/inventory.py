"""Inventory API routes — per-night availability of a property."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.deps import get_current_provider, get_db
from marketplace.api.errors import to_http_exception
from marketplace.errors import MarketplaceError
from marketplace.models.provider import Provider
from marketplace.schemas.inventory import (
    AvailabilityResponse,
    InventoryEntryResponse,
    InventoryReplace,
    InventoryResponse,
)
from marketplace.services.inventory_service import (
    check_availability,
    ensure_owner,
    get_inventory,
    get_property,
    replace_inventory,
)

router = APIRouter(prefix="/api/v1/properties", tags=["inventory"])


@router.get(
    "/{property_id}/inventory",
    response_model=InventoryResponse,
    summary="Get a property's inventory",
)
async def read_inventory(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> InventoryResponse:
    """Return every inventory entry of the property, ordered by date."""
    try:
        entries = await get_inventory(db, property_id)
    except MarketplaceError as e:
        raise to_http_exception(e) from e
    return InventoryResponse(inventory=[InventoryEntryResponse.model_validate(entry) for entry in entries])


@router.put(
    "/{property_id}/inventory",
    response_model=InventoryResponse,
    summary="Replace a property's inventory",
)
async def put_inventory(
    property_id: uuid.UUID,
    body: InventoryReplace,
    db: AsyncSession = Depends(get_db),
    current_provider: Provider = Depends(get_current_provider),
) -> InventoryResponse:
    """Replace the whole inventory list. Callers send the full desired list, not a delta."""
    try:
        prop = await get_property(db, property_id)
        ensure_owner(prop, current_provider.id)
        entries = await replace_inventory(db, prop, [entry.model_dump() for entry in body.inventory])
    except MarketplaceError as e:
        raise to_http_exception(e) from e
    return InventoryResponse(inventory=[InventoryEntryResponse.model_validate(entry) for entry in entries])


@router.get(
    "/{property_id}/availability",
    response_model=AvailabilityResponse,
    summary="Check a stay against current inventory",
)
async def read_availability(
    property_id: uuid.UUID,
    check_in: date = Query(..., description="First night (ISO date)"),
    check_out: date = Query(..., description="Departure day, exclusive (ISO date)"),
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResponse:
    """Report whether every night is available and list the ones that are not."""
    try:
        check = await check_availability(db, property_id, check_in, check_out)
    except MarketplaceError as e:
        raise to_http_exception(e) from e
    return AvailabilityResponse(ok=check.ok, unavailable_dates=check.unavailable_dates)
