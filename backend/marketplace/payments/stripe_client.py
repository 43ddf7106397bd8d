"""Async Stripe API wrapper for stay payments."""

import logging
from decimal import Decimal

import stripe
from stripe import StripeClient

from marketplace.config import settings

logger = logging.getLogger(__name__)


def get_stripe_client() -> StripeClient:
    """Create a StripeClient instance with async HTTP support."""
    return StripeClient(
        settings.stripe_secret_key,
        http_client=stripe.HTTPXClient(),
    )


def to_minor_units(amount: Decimal) -> int:
    """Convert an amount in currency units to Stripe's integer minor units."""
    return int((amount * 100).quantize(Decimal("1")))


async def create_checkout_session(
    amount: Decimal,
    description: str,
    customer_email: str,
    metadata: dict[str, str],
    success_url: str,
    cancel_url: str,
) -> stripe.checkout.Session:
    """Create a one-off payment Checkout Session for a stay."""
    client = get_stripe_client()
    logger.info(
        "Creating checkout session for property %s (%s %s)",
        metadata.get("property_id"),
        amount,
        settings.stripe_currency,
    )
    return await client.v1.checkout.sessions.create_async(
        params={
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": settings.stripe_currency,
                        "unit_amount": to_minor_units(amount),
                        "product_data": {"name": description},
                    },
                    "quantity": 1,
                }
            ],
            "customer_email": customer_email,
            "metadata": metadata,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
    )


async def create_refund(payment_intent_id: str, reason: str = "requested_by_customer") -> stripe.Refund:
    """Refund a Checkout payment in full."""
    client = get_stripe_client()
    logger.info("Refunding payment intent %s", payment_intent_id)
    return await client.v1.refunds.create_async(
        params={"payment_intent": payment_intent_id, "reason": reason}
    )


def construct_webhook_event(payload: bytes, sig_header: str) -> stripe.Event:
    """Verify the Stripe-Signature header and parse the event (synchronous)."""
    client = get_stripe_client()
    return client.construct_event(payload, sig_header, settings.stripe_webhook_secret)
