"""InventoryEntry model — one availability flag per property per night."""

import datetime
import uuid

from sqlalchemy import Boolean, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.database import Base, UUIDPrimaryKeyMixin


class InventoryEntry(UUIDPrimaryKeyMixin, Base):
    """Availability of a property for a single calendar day (UTC)."""

    __tablename__ = "inventory_entries"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    property: Mapped["Property"] = relationship(back_populates="inventory")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (UniqueConstraint("property_id", "date", name="uq_inventory_property_date"),)

    def __repr__(self) -> str:
        return f"<InventoryEntry(property_id={self.property_id}, date={self.date}, available={self.available})>"
