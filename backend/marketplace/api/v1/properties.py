"""Properties API routes — public browsing, owner-scoped mutation."""

import uuid
from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.deps import get_current_provider, get_db
from marketplace.api.errors import to_http_exception
from marketplace.config import settings
from marketplace.errors import MarketplaceError, ValidationError
from marketplace.inventory.calendar import utc_today
from marketplace.models.property import Property
from marketplace.models.provider import Provider
from marketplace.schemas.auth import MessageResponse
from marketplace.schemas.property import (
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from marketplace.services.inventory_service import (
    ensure_owner,
    get_property,
    list_available_properties,
    replace_inventory,
)

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new property",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_provider: Provider = Depends(get_current_provider),
) -> PropertyResponse:
    """Create a listing owned by the authenticated provider, with optional initial inventory."""
    prop = Property(
        owner_id=current_provider.id,
        **body.model_dump(exclude={"inventory"}),
    )
    db.add(prop)
    await db.flush()
    await db.refresh(prop)

    try:
        await replace_inventory(db, prop, [entry.model_dump() for entry in body.inventory])
    except MarketplaceError as e:
        raise to_http_exception(e) from e

    return PropertyResponse.model_validate(prop)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="List all properties",
)
async def list_properties(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Return a page of every listing, newest first."""
    total = (await db.execute(select(func.count()).select_from(Property))).scalar_one()
    result = await db.execute(select(Property).order_by(Property.created_at.desc()).offset(skip).limit(limit))
    items = list(result.scalars().all())
    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
    )


@router.get(
    "/available",
    response_model=PropertyListResponse,
    summary="List properties with open nights in a window",
)
async def list_available(
    start: date | None = Query(None, description="First day of the window (default today, UTC)"),
    end: date | None = Query(None, description="Last day of the window, inclusive"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Listings with at least one available night between ``start`` and ``end``.

    Defaults to the next ``browse_window_days`` days.
    """
    window_start = start or utc_today()
    window_end = end or window_start + timedelta(days=settings.browse_window_days)
    if window_end < window_start:
        raise to_http_exception(ValidationError("end must not be before start"))

    items, total = await list_available_properties(db, window_start, window_end, skip, limit)
    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
    )


@router.get(
    "/mine",
    response_model=PropertyListResponse,
    summary="List properties owned by the current provider",
)
async def list_my_properties(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_provider: Provider = Depends(get_current_provider),
) -> PropertyListResponse:
    """Return the provider's own listings."""
    owner_filter = Property.owner_id == current_provider.id
    total = (await db.execute(select(func.count()).select_from(Property).where(owner_filter))).scalar_one()
    result = await db.execute(
        select(Property).where(owner_filter).order_by(Property.created_at.desc()).offset(skip).limit(limit)
    )
    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in result.scalars().all()],
        total=total,
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a property by ID",
)
async def get_property_detail(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> PropertyResponse:
    """Retrieve a single listing with its inventory."""
    try:
        prop = await get_property(db, property_id)
    except MarketplaceError as e:
        raise to_http_exception(e) from e
    return PropertyResponse.model_validate(prop)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_provider: Provider = Depends(get_current_provider),
) -> PropertyResponse:
    """Partially update a listing. Only the owner may do this; ownership never changes."""
    try:
        prop = await get_property(db, property_id)
        ensure_owner(prop, current_provider.id)
    except MarketplaceError as e:
        raise to_http_exception(e) from e

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field in ("title", "price_per_night", "images"):
            continue
        setattr(prop, field, value)

    await db.flush()
    await db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delete a property",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_provider: Provider = Depends(get_current_provider),
) -> MessageResponse:
    """Delete a listing along with its inventory and bookings."""
    try:
        prop = await get_property(db, property_id)
        ensure_owner(prop, current_provider.id)
    except MarketplaceError as e:
        raise to_http_exception(e) from e

    await db.delete(prop)
    await db.flush()
    return MessageResponse(message="Property deleted")
