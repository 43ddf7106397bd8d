"""Inventory service — reading, replacing, and booking out property nights.

``apply_booking`` is the only path that flips nights to unavailable. It
re-validates against current inventory and then issues a single conditional
UPDATE that only touches nights still flagged available. If fewer rows change
than the stay has nights, another writer got there first and the whole stay
is rejected with ``ConflictError``; the caller's transaction must then be
rolled back.
"""

import logging
import uuid
from datetime import date, datetime

from sqlalchemy import and_, exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.errors import ConflictError, ForbiddenError, NotFoundError
from marketplace.inventory.calendar import (
    Calendar,
    RangeCheck,
    build_calendar,
    require_valid_range,
    validate_range,
)
from marketplace.models.inventory import InventoryEntry
from marketplace.models.property import Property

logger = logging.getLogger(__name__)


async def get_property(db: AsyncSession, property_id: uuid.UUID) -> Property:
    """Load a property or raise ``NotFoundError``."""
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()
    if prop is None:
        raise NotFoundError("Property not found")
    return prop


def ensure_owner(prop: Property, provider_id: uuid.UUID) -> None:
    """Raise ``ForbiddenError`` unless ``provider_id`` owns the property."""
    if prop.owner_id != provider_id:
        raise ForbiddenError("Not authorized to modify this property")


async def get_inventory(db: AsyncSession, property_id: uuid.UUID) -> list[InventoryEntry]:
    """Return every inventory entry of a property, ordered by date."""
    await get_property(db, property_id)
    result = await db.execute(
        select(InventoryEntry).where(InventoryEntry.property_id == property_id).order_by(InventoryEntry.date)
    )
    return list(result.scalars().all())


async def load_calendar(db: AsyncSession, property_id: uuid.UUID) -> Calendar:
    """Read the current date -> available mapping straight from the database."""
    result = await db.execute(
        select(InventoryEntry.date, InventoryEntry.available).where(InventoryEntry.property_id == property_id)
    )
    return {row.date: row.available for row in result.all()}


async def replace_inventory(
    db: AsyncSession,
    prop: Property,
    entries: list,
) -> list[InventoryEntry]:
    """Replace a property's inventory wholesale with ``entries``.

    Entries may be objects or mappings with ``date`` and ``available``.
    Duplicate dates raise ``ValidationError`` before anything is written.
    """
    calendar = build_calendar(entries)

    await db.refresh(prop, attribute_names=["inventory"])

    # Old rows must be gone before the new ones hit the (property, date) unique index
    prop.inventory.clear()
    await db.flush()

    prop.inventory.extend(
        InventoryEntry(property_id=prop.id, date=day, available=available)
        for day, available in sorted(calendar.items())
    )
    await db.flush()
    logger.info("Replaced inventory of property %s with %d entries", prop.id, len(calendar))
    return list(prop.inventory)


async def check_availability(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date | datetime | str,
    check_out: date | datetime | str,
) -> RangeCheck:
    """Validate a stay against the property's current inventory."""
    require_valid_range(check_in, check_out)
    await get_property(db, property_id)
    calendar = await load_calendar(db, property_id)
    return validate_range(calendar, check_in, check_out)


async def apply_booking(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date | datetime | str,
    check_out: date | datetime | str,
) -> list[date]:
    """Mark every night of a stay unavailable, all or nothing.

    Returns the nights that were booked out.

    Raises:
        ValidationError: the stay covers no nights.
        ConflictError: at least one night is absent or already unavailable,
            either in the current read or at write time.
    """
    nights = require_valid_range(check_in, check_out)

    calendar = await load_calendar(db, property_id)
    check = validate_range(calendar, check_in, check_out)
    if not check.ok:
        raise ConflictError("Requested dates are not available", check.unavailable_dates)

    result = await db.execute(
        update(InventoryEntry)
        .where(
            InventoryEntry.property_id == property_id,
            InventoryEntry.date.in_(nights),
            InventoryEntry.available.is_(True),
        )
        .values(available=False)
        .returning(InventoryEntry.date)
    )
    flipped = set(result.scalars().all())

    if len(flipped) != len(nights):
        taken = [night for night in nights if night not in flipped]
        logger.warning(
            "Concurrent booking took %d night(s) of property %s between check and write: %s",
            len(taken),
            property_id,
            ", ".join(night.isoformat() for night in taken),
        )
        raise ConflictError("Requested dates are not available", taken)

    logger.info(
        "Booked out %d night(s) of property %s from %s",
        len(nights),
        property_id,
        nights[0].isoformat(),
    )
    return nights


async def list_available_properties(
    db: AsyncSession,
    start: date,
    end: date,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Property], int]:
    """Properties with at least one available night in ``[start, end]``."""
    has_open_night = exists().where(
        and_(
            InventoryEntry.property_id == Property.id,
            InventoryEntry.date >= start,
            InventoryEntry.date <= end,
            InventoryEntry.available.is_(True),
        )
    )

    total_result = await db.execute(select(func.count()).select_from(Property).where(has_open_night))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Property).where(has_open_night).order_by(Property.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total
