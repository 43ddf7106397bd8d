"""Seed the database with a demo provider, listings, and open inventory.

Each listing gets the next 60 nights flagged available, except a few nights
blocked by the owner, plus one confirmed booking made through the regular
booking path so its nights are flipped the same way a guest's would be.

Run from the backend directory:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from marketplace.auth.passwords import hash_password
from marketplace.database import async_session_factory, engine
from marketplace.inventory.calendar import utc_today
from marketplace.models.property import Property
from marketplace.models.provider import Provider
from marketplace.services.booking_service import create_booking
from marketplace.services.inventory_service import replace_inventory

DEMO_PROVIDER = {
    "email": "demo@example.com",
    "password": "demo1234",
    "name": "Demo Host",
}

PROPERTIES = [
    {
        "title": "Cliffside Cottage",
        "description": "Two bedrooms above the bay, wood stove, ten minutes' walk to the harbour.",
        "price_per_night": Decimal("145.00"),
        "images": ["cottage/front.jpg", "cottage/living-room.jpg"],
        "blocked_offsets": [10, 11],
    },
    {
        "title": "Downtown Loft",
        "description": "Open-plan loft with a rooftop terrace, close to the old town.",
        "price_per_night": Decimal("210.00"),
        "images": ["loft/terrace.jpg"],
        "blocked_offsets": [],
    },
    {
        "title": "Lakeside Cabin",
        "description": "Quiet cabin with a private jetty and a rowing boat.",
        "price_per_night": Decimal("98.50"),
        "images": ["cabin/jetty.jpg", "cabin/bedroom.jpg"],
        "blocked_offsets": [0, 1, 2],
    },
]

OPEN_NIGHTS = 60


async def seed() -> None:
    async with async_session_factory() as session:
        existing = await session.execute(select(Provider).where(Provider.email == DEMO_PROVIDER["email"]))
        if existing.scalar_one_or_none() is not None:
            print("Demo provider already exists, nothing to do.")
            return

        provider = Provider(
            email=DEMO_PROVIDER["email"],
            hashed_password=hash_password(DEMO_PROVIDER["password"]),
            name=DEMO_PROVIDER["name"],
            auth_provider="local",
        )
        session.add(provider)
        await session.flush()
        print(f"Created demo provider: {provider.email} (id={provider.id})")

        today = utc_today()
        created: list[Property] = []
        for data in PROPERTIES:
            blocked = {today + timedelta(days=offset) for offset in data["blocked_offsets"]}
            prop = Property(
                owner_id=provider.id,
                title=data["title"],
                description=data["description"],
                price_per_night=data["price_per_night"],
                images=data["images"],
            )
            session.add(prop)
            await session.flush()

            nights = [today + timedelta(days=offset) for offset in range(OPEN_NIGHTS)]
            await replace_inventory(
                session,
                prop,
                [{"date": night, "available": night not in blocked} for night in nights],
            )
            created.append(prop)
            print(f"   {prop.title} (${prop.price_per_night}/night, {len(blocked)} blocked nights)")

        booking = await create_booking(
            session,
            property_id=created[1].id,
            guest_name="Avery Guest",
            guest_email="avery@example.com",
            check_in=today + timedelta(days=7),
            check_out=today + timedelta(days=10),
        )
        await session.commit()

        print(f"Created booking {booking.id} ({booking.check_in} to {booking.check_out})")
        print(f"Done. Log in with {DEMO_PROVIDER['email']} / {DEMO_PROVIDER['password']}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
