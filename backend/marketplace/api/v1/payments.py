"""Payments API — Stripe Checkout for guest stays."""

import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.deps import get_db
from marketplace.api.errors import to_http_exception
from marketplace.config import settings
from marketplace.errors import ConflictError, MarketplaceError
from marketplace.payments.stripe_client import create_checkout_session
from marketplace.schemas.payment import CheckoutRequest, CheckoutResponse
from marketplace.services.booking_service import quote_stay
from marketplace.services.inventory_service import check_availability, get_property

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    body: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
) -> CheckoutResponse:
    """Start a Stripe Checkout for a stay.

    The amount is computed here from the nightly rate, never taken from the
    client. Nothing is reserved yet: the booking is recorded by the
    ``checkout.session.completed`` webhook once Stripe confirms payment.
    """
    try:
        prop = await get_property(db, body.property_id)
        check = await check_availability(db, prop.id, body.check_in, body.check_out)
        if not check.ok:
            raise ConflictError("Requested dates are not available", check.unavailable_dates)
        amount = quote_stay(prop, body.check_in, body.check_out)
    except MarketplaceError as e:
        raise to_http_exception(e) from e

    metadata = {
        "property_id": str(prop.id),
        "guest_name": body.guest_name,
        "guest_email": body.guest_email,
        "check_in": body.check_in.isoformat(),
        "check_out": body.check_out.isoformat(),
    }

    try:
        session = await create_checkout_session(
            amount=amount,
            description=f"{prop.title}: {body.check_in.isoformat()} to {body.check_out.isoformat()}",
            customer_email=body.guest_email,
            metadata=metadata,
            success_url=f"{settings.frontend_url}/booking-success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.frontend_url}/booking-cancelled",
        )
    except stripe.StripeError as e:
        logger.error("Stripe checkout error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e

    return CheckoutResponse(
        checkout_url=session.url,
        session_id=session.id,
        amount=amount,
        currency=settings.stripe_currency,
    )
