"""Booking service — records confirmed stays together with their inventory flip."""

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import settings
from marketplace.errors import NotFoundError, ValidationError
from marketplace.inventory.calendar import normalize_date, require_valid_range
from marketplace.models.booking import Booking
from marketplace.models.property import Property
from marketplace.services.inventory_service import apply_booking, get_property

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def quote_stay(prop: Property, check_in: date | datetime | str, check_out: date | datetime | str) -> Decimal:
    """Price of a stay: nightly rate times nights, plus the flat booking fee."""
    nights = require_valid_range(check_in, check_out)
    total = Decimal(prop.price_per_night) * len(nights) + settings.booking_fee
    return total.quantize(_CENTS)


async def create_booking(
    db: AsyncSession,
    property_id: uuid.UUID,
    guest_name: str,
    guest_email: str,
    check_in: date | datetime | str,
    check_out: date | datetime | str,
    stripe_session_id: str | None = None,
) -> Booking:
    """Book a stay: flip its nights to unavailable and record a confirmed booking.

    Both writes go through ``db`` and are only durable once the caller
    commits; on any error the caller rolls back and neither persists.

    Raises:
        ValidationError: empty guest details or check-out not after check-in.
        NotFoundError: unknown property.
        ConflictError: one or more nights unavailable (all of them listed).
    """
    if not guest_name or not guest_name.strip():
        raise ValidationError("guest_name is required")
    if not guest_email or not guest_email.strip():
        raise ValidationError("guest_email is required")
    require_valid_range(check_in, check_out)

    prop = await get_property(db, property_id)
    await apply_booking(db, prop.id, check_in, check_out)

    booking = Booking(
        property=prop,
        guest_name=guest_name.strip(),
        guest_email=guest_email.strip(),
        check_in=normalize_date(check_in),
        check_out=normalize_date(check_out),
        status="confirmed",
        total_price=quote_stay(prop, check_in, check_out),
        stripe_session_id=stripe_session_id,
    )
    db.add(booking)
    await db.flush()
    await db.refresh(booking)

    logger.info(
        "Booking %s confirmed for property %s (%s to %s)",
        booking.id,
        prop.id,
        booking.check_in.isoformat(),
        booking.check_out.isoformat(),
    )
    return booking


async def get_booking_by_session(db: AsyncSession, session_id: str) -> Booking | None:
    """Look up the booking created for a Stripe Checkout session."""
    result = await db.execute(select(Booking).where(Booking.stripe_session_id == session_id))
    return result.scalar_one_or_none()


async def list_provider_bookings(
    db: AsyncSession,
    provider_id: uuid.UUID,
    property_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Booking], int]:
    """Bookings on properties owned by ``provider_id``, newest first."""
    filters = [Property.owner_id == provider_id]
    if property_id is not None:
        filters.append(Booking.property_id == property_id)

    count_query = (
        select(func.count()).select_from(Booking).join(Property, Booking.property_id == Property.id).where(*filters)
    )
    total = (await db.execute(count_query)).scalar_one()

    items_query = (
        select(Booking)
        .join(Property, Booking.property_id == Property.id)
        .where(*filters)
        .order_by(Booking.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(items_query)
    return list(result.scalars().all()), total


async def get_provider_booking(db: AsyncSession, provider_id: uuid.UUID, booking_id: uuid.UUID) -> Booking:
    """Fetch a booking on one of the provider's properties, else ``NotFoundError``."""
    result = await db.execute(
        select(Booking)
        .join(Property, Booking.property_id == Property.id)
        .where(Booking.id == booking_id, Property.owner_id == provider_id)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking
