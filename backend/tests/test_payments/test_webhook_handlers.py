"""Tests for Stripe webhook handler functions with mocked Stripe events."""

import uuid
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
import stripe
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.errors import UpstreamError
from marketplace.models.property import Property
from marketplace.payments.webhooks import (
    _stay_from_metadata,
    handle_checkout_session_completed,
    handle_checkout_session_expired,
)
from marketplace.services.booking_service import create_booking, get_booking_by_session
from marketplace.services.inventory_service import load_calendar, replace_inventory

pytestmark = pytest.mark.asyncio

JUNE_1 = date(2030, 6, 1)


async def _open_property(db_session: AsyncSession, owner) -> Property:
    prop = Property(owner_id=owner.id, title="Webhook Cottage", price_per_night=Decimal("100.00"), images=[])
    db_session.add(prop)
    await db_session.flush()
    await db_session.refresh(prop)
    await replace_inventory(
        db_session,
        prop,
        [{"date": JUNE_1 + timedelta(days=i), "available": True} for i in range(10)],
    )
    return prop


def _metadata(prop: Property, check_in: str = "2030-06-02", check_out: str = "2030-06-05") -> dict:
    return {
        "property_id": str(prop.id),
        "guest_name": "Avery Guest",
        "guest_email": "avery@example.com",
        "check_in": check_in,
        "check_out": check_out,
    }


def _make_event(
    event_type: str,
    metadata: dict,
    payment_status: str = "paid",
    session_id: str | None = None,
) -> SimpleNamespace:
    """Create a fake Stripe Event-like object."""
    session = SimpleNamespace(
        id=session_id or f"cs_test_{uuid.uuid4().hex[:8]}",
        payment_status=payment_status,
        payment_intent="pi_test_123",
        metadata=metadata,
    )
    return SimpleNamespace(
        type=event_type,
        id=f"evt_test_{uuid.uuid4().hex[:8]}",
        data=SimpleNamespace(object=session),
    )


class TestStayFromMetadata:
    def test_complete_metadata(self):
        property_id = uuid.uuid4()
        session = SimpleNamespace(
            metadata={
                "property_id": str(property_id),
                "guest_name": "A",
                "guest_email": "a@example.com",
                "check_in": "2030-06-02",
                "check_out": "2030-06-03",
            }
        )
        stay = _stay_from_metadata(session)
        assert stay["property_id"] == property_id
        assert stay["check_in"] == "2030-06-02"

    def test_missing_key(self):
        assert _stay_from_metadata(SimpleNamespace(metadata={"property_id": str(uuid.uuid4())})) is None

    def test_bad_property_id(self):
        metadata = {
            "property_id": "nope",
            "guest_name": "A",
            "guest_email": "a@example.com",
            "check_in": "2030-06-02",
            "check_out": "2030-06-03",
        }
        assert _stay_from_metadata(SimpleNamespace(metadata=metadata)) is None

    def test_no_metadata(self):
        assert _stay_from_metadata(SimpleNamespace(metadata=None)) is None


class TestCheckoutSessionCompleted:
    async def test_paid_session_records_booking(self, db_session: AsyncSession, test_provider):
        prop = await _open_property(db_session, test_provider)
        event = _make_event("checkout.session.completed", _metadata(prop), session_id="cs_test_paid")

        with patch("marketplace.payments.webhooks.create_refund", new_callable=AsyncMock) as refund:
            await handle_checkout_session_completed(db_session, event)

        refund.assert_not_awaited()
        booking = await get_booking_by_session(db_session, "cs_test_paid")
        assert booking is not None
        assert booking.status == "confirmed"
        assert booking.total_price == Decimal("360.00")

        calendar = await load_calendar(db_session, prop.id)
        assert calendar[date(2030, 6, 2)] is False
        assert calendar[date(2030, 6, 4)] is False

    async def test_replayed_event_is_idempotent(self, db_session: AsyncSession, test_provider):
        prop = await _open_property(db_session, test_provider)
        event = _make_event("checkout.session.completed", _metadata(prop), session_id="cs_test_replay")

        with patch("marketplace.payments.webhooks.create_refund", new_callable=AsyncMock) as refund:
            await handle_checkout_session_completed(db_session, event)
            await handle_checkout_session_completed(db_session, event)

        # The second delivery neither conflicts nor refunds
        refund.assert_not_awaited()
        assert await get_booking_by_session(db_session, "cs_test_replay") is not None

    async def test_concurrent_duplicate_delivery_not_refunded(self, db_session: AsyncSession, test_provider):
        """A delivery that missed the other's uncommitted booking conflicts, but must not refund."""
        prop = await _open_property(db_session, test_provider)
        event = _make_event("checkout.session.completed", _metadata(prop), session_id="cs_test_dup")

        with patch("marketplace.payments.webhooks.create_refund", new_callable=AsyncMock) as refund:
            await handle_checkout_session_completed(db_session, event)

            # The racing delivery's first lookup ran before the booking was visible
            lookups = []

            async def lookup_after_first_miss(db, session_id):
                lookups.append(session_id)
                if len(lookups) == 1:
                    return None
                return await get_booking_by_session(db, session_id)

            with patch("marketplace.payments.webhooks.get_booking_by_session", new=lookup_after_first_miss):
                await handle_checkout_session_completed(db_session, event)

        refund.assert_not_awaited()
        assert lookups == ["cs_test_dup", "cs_test_dup"]
        booking = await get_booking_by_session(db_session, "cs_test_dup")
        assert booking is not None
        assert booking.status == "confirmed"

    async def test_unpaid_session_skipped(self, db_session: AsyncSession, test_provider):
        prop = await _open_property(db_session, test_provider)
        event = _make_event(
            "checkout.session.completed", _metadata(prop), payment_status="unpaid", session_id="cs_test_unpaid"
        )

        await handle_checkout_session_completed(db_session, event)

        assert await get_booking_by_session(db_session, "cs_test_unpaid") is None
        assert all((await load_calendar(db_session, prop.id)).values())

    async def test_conflict_refunds_payment(self, db_session: AsyncSession, test_provider):
        prop = await _open_property(db_session, test_provider)
        await create_booking(
            db_session,
            property_id=prop.id,
            guest_name="Earlier Guest",
            guest_email="earlier@example.com",
            check_in="2030-06-03",
            check_out="2030-06-04",
        )
        await db_session.commit()
        # The handler rolls back, which expires every loaded instance
        property_id = prop.id

        event = _make_event("checkout.session.completed", _metadata(prop), session_id="cs_test_conflict")
        with patch("marketplace.payments.webhooks.create_refund", new_callable=AsyncMock) as refund:
            await handle_checkout_session_completed(db_session, event)

        refund.assert_awaited_once_with("pi_test_123")
        assert await get_booking_by_session(db_session, "cs_test_conflict") is None
        calendar = await load_calendar(db_session, property_id)
        assert calendar[date(2030, 6, 2)] is True
        assert calendar[date(2030, 6, 4)] is True

    async def test_unknown_property_refunds_payment(self, db_session: AsyncSession):
        metadata = {
            "property_id": str(uuid.uuid4()),
            "guest_name": "Avery Guest",
            "guest_email": "avery@example.com",
            "check_in": "2030-06-02",
            "check_out": "2030-06-05",
        }
        event = _make_event("checkout.session.completed", metadata)

        with patch("marketplace.payments.webhooks.create_refund", new_callable=AsyncMock) as refund:
            await handle_checkout_session_completed(db_session, event)

        refund.assert_awaited_once()

    async def test_refund_failure_raises(self, db_session: AsyncSession):
        metadata = {
            "property_id": str(uuid.uuid4()),
            "guest_name": "Avery Guest",
            "guest_email": "avery@example.com",
            "check_in": "2030-06-02",
            "check_out": "2030-06-05",
        }
        event = _make_event("checkout.session.completed", metadata)

        with patch(
            "marketplace.payments.webhooks.create_refund",
            new_callable=AsyncMock,
            side_effect=stripe.StripeError("card network down"),
        ):
            with pytest.raises(UpstreamError):
                await handle_checkout_session_completed(db_session, event)

    async def test_missing_metadata_skipped(self, db_session: AsyncSession):
        event = _make_event("checkout.session.completed", {}, session_id="cs_test_nometa")

        with patch("marketplace.payments.webhooks.create_refund", new_callable=AsyncMock) as refund:
            await handle_checkout_session_completed(db_session, event)

        refund.assert_not_awaited()
        assert await get_booking_by_session(db_session, "cs_test_nometa") is None

    async def test_email_failure_keeps_booking(self, db_session: AsyncSession, test_provider):
        prop = await _open_property(db_session, test_provider)
        event = _make_event("checkout.session.completed", _metadata(prop), session_id="cs_test_mailfail")

        with patch(
            "marketplace.payments.webhooks.send_booking_confirmation",
            new_callable=AsyncMock,
            side_effect=UpstreamError("SMTP unreachable"),
        ):
            await handle_checkout_session_completed(db_session, event)

        assert await get_booking_by_session(db_session, "cs_test_mailfail") is not None


class TestCheckoutSessionExpired:
    async def test_expired_changes_nothing(self, db_session: AsyncSession, test_provider):
        prop = await _open_property(db_session, test_provider)
        event = _make_event("checkout.session.expired", _metadata(prop), payment_status="unpaid")

        await handle_checkout_session_expired(db_session, event)

        assert all((await load_calendar(db_session, prop.id)).values())
