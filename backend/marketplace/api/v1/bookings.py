"""Bookings API router.

Guests book without an account. Providers can list and read bookings on
**their** properties only; every provider query filters through
``Property.owner_id``.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.deps import get_current_provider, get_db
from marketplace.api.errors import to_http_exception
from marketplace.errors import MarketplaceError, UpstreamError
from marketplace.models.booking import Booking
from marketplace.models.provider import Provider
from marketplace.schemas.booking import (
    BookingCreate,
    BookingCreatedResponse,
    BookingListResponse,
    BookingResponse,
)
from marketplace.services.booking_service import (
    create_booking,
    get_booking_by_session,
    get_provider_booking,
    list_provider_bookings,
)
from marketplace.services.notification_service import send_booking_confirmation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a stay",
)
async def book_stay(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
) -> BookingCreatedResponse:
    """Book a stay and mark its nights unavailable in one transaction.

    Returns 409 listing every unavailable night when the stay cannot be
    booked. The booking is committed before the confirmation email is sent;
    a mail failure is reported in the response, not as an error.
    """
    try:
        booking = await create_booking(
            db,
            property_id=body.property_id,
            guest_name=body.guest_name,
            guest_email=body.guest_email,
            check_in=body.check_in,
            check_out=body.check_out,
        )
    except MarketplaceError as e:
        raise to_http_exception(e) from e

    await db.commit()

    try:
        email_sent = await send_booking_confirmation(booking, booking.property)
    except UpstreamError as e:
        logger.warning("Booking %s recorded, confirmation email failed: %s", booking.id, e.message)
        return BookingCreatedResponse(
            message="Booking recorded, confirmation email failed",
            booking=BookingResponse.model_validate(booking),
            email_sent=False,
        )

    return BookingCreatedResponse(
        message="Booking confirmed and email sent" if email_sent else "Booking confirmed",
        booking=BookingResponse.model_validate(booking),
        email_sent=email_sent,
    )


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List bookings on the current provider's properties",
)
async def list_bookings(
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_provider: Provider = Depends(get_current_provider),
) -> dict:
    """Return a page of bookings, newest first."""
    items, total = await list_provider_bookings(db, current_provider.id, property_id, skip, limit)
    return {"items": items, "total": total}


@router.get(
    "/by-session/{session_id}",
    response_model=BookingResponse,
    summary="Get the booking created for a Stripe Checkout session",
)
async def get_booking_for_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
) -> Booking:
    """Lets the success page poll for the booking the payment webhook records.

    Returns 404 until the webhook has been processed.
    """
    booking = await get_booking_by_session(db, session_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_provider: Provider = Depends(get_current_provider),
) -> Booking:
    """Retrieve a booking on one of the provider's properties, else 404."""
    try:
        return await get_provider_booking(db, current_provider.id, booking_id)
    except MarketplaceError as e:
        raise to_http_exception(e) from e
