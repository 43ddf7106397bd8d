"""Pydantic v2 schemas for payment checkout."""

from decimal import Decimal

from pydantic import BaseModel

from marketplace.schemas.booking import StayRequest


class CheckoutRequest(StayRequest):
    """Stay details to be paid for through Stripe Checkout."""


class CheckoutResponse(BaseModel):
    checkout_url: str
    session_id: str
    amount: Decimal
    currency: str
