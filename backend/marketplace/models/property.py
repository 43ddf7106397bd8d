"""Property model — listings offered for nightly stays."""

import uuid
from decimal import Decimal

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rental listing owned by a provider."""

    __tablename__ = "properties"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("providers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    images: Mapped[list] = mapped_column(JSON, default=list)

    # Relationships
    owner: Mapped["Provider"] = relationship(back_populates="properties", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    inventory: Mapped[list["InventoryEntry"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="InventoryEntry.date",
    )
    bookings: Mapped[list["Booking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", lazy="selectin", cascade="all, delete-orphan"
    )

    __table_args__ = (CheckConstraint("price_per_night >= 0", name="ck_properties_price_non_negative"),)

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, price={self.price_per_night})>"
