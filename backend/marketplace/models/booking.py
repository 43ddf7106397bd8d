"""Booking model — confirmed stays at a property."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("pending", "confirmed", "cancelled")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A guest's stay at a property, from check-in (inclusive) to check-out (exclusive)."""

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False)
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="confirmed", index=True)  # pending, confirmed, cancelled
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    # Set when the booking was paid through Stripe Checkout
    stripe_session_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)

    # Relationships
    property: Mapped["Property"] = relationship(back_populates="bookings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        Index("ix_bookings_check_in", "check_in"),
        CheckConstraint("check_in < check_out", name="ck_bookings_dates_ordered"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, property_id={self.property_id}, status={self.status})>"
