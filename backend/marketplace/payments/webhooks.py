"""Stripe webhook event handlers — turn paid checkouts into bookings."""

import logging
import uuid

import stripe
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.errors import ConflictError, NotFoundError, UpstreamError, ValidationError
from marketplace.payments.stripe_client import create_refund
from marketplace.services.booking_service import create_booking, get_booking_by_session
from marketplace.services.notification_service import send_booking_confirmation

logger = logging.getLogger(__name__)

STAY_METADATA_KEYS = ("property_id", "guest_name", "guest_email", "check_in", "check_out")


def _stay_from_metadata(session) -> dict | None:
    """Extract stay details stored on the session at checkout time."""
    metadata = session.metadata or {}
    try:
        stay = {key: metadata[key] for key in STAY_METADATA_KEYS}
    except KeyError:
        return None
    try:
        stay["property_id"] = uuid.UUID(stay["property_id"])
    except ValueError:
        return None
    return stay


async def _refund(session, reason: str) -> None:
    payment_intent = getattr(session, "payment_intent", None)
    if not payment_intent:
        logger.error("Checkout session %s has no payment intent to refund (%s)", session.id, reason)
        return
    try:
        await create_refund(payment_intent)
    except stripe.StripeError as e:
        raise UpstreamError(f"Refund failed for checkout session {session.id}: {e}") from e
    logger.info("Refunded checkout session %s: %s", session.id, reason)


async def handle_checkout_session_completed(db: AsyncSession, event: stripe.Event) -> None:
    """Handle checkout.session.completed — record the paid booking.

    Replays of the same session are ignored. When the nights were taken
    between checkout and payment, the booking is not recorded and the payment
    is refunded.
    """
    session = event.data.object

    if getattr(session, "payment_status", None) != "paid":
        logger.info("Checkout session %s not paid yet (%s), skipping", session.id, session.payment_status)
        return

    existing = await get_booking_by_session(db, session.id)
    if existing is not None:
        logger.info("Checkout session %s already recorded as booking %s", session.id, existing.id)
        return

    stay = _stay_from_metadata(session)
    if stay is None:
        logger.error("Checkout session %s is missing stay metadata, cannot record booking", session.id)
        return

    try:
        booking = await create_booking(db, stripe_session_id=session.id, **stay)
    except ConflictError as e:
        await db.rollback()
        # A concurrent delivery of this same event may have booked the nights
        duplicate = await get_booking_by_session(db, session.id)
        if duplicate is not None:
            logger.info(
                "Checkout session %s already recorded as booking %s by a concurrent delivery",
                session.id,
                duplicate.id,
            )
            return
        logger.error(
            "Paid checkout %s conflicts with existing bookings on %s; refunding",
            session.id,
            ", ".join(d.isoformat() for d in e.unavailable_dates),
        )
        await _refund(session, "dates no longer available")
        return
    except (NotFoundError, ValidationError) as e:
        await db.rollback()
        logger.error("Paid checkout %s cannot be booked: %s; refunding", session.id, e.message)
        await _refund(session, e.message)
        return

    # Committed before emailing so a mail failure cannot undo a paid booking
    await db.commit()
    logger.info("Checkout session %s recorded as booking %s", session.id, booking.id)

    try:
        await send_booking_confirmation(booking, booking.property)
    except UpstreamError as e:
        logger.warning("Booking %s recorded, confirmation email failed: %s", booking.id, e.message)


async def handle_checkout_session_expired(db: AsyncSession, event: stripe.Event) -> None:  # noqa: ARG001
    """Handle checkout.session.expired — nothing was reserved, only log it."""
    session = event.data.object
    logger.info("Checkout session %s expired without payment", session.id)
