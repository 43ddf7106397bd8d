"""SQLAlchemy models for the rental marketplace.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from marketplace.models.booking import Booking
from marketplace.models.inventory import InventoryEntry
from marketplace.models.property import Property
from marketplace.models.provider import Provider

__all__ = [
    "Booking",
    "InventoryEntry",
    "Property",
    "Provider",
]
