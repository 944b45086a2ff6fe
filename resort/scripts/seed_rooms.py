"""
Seeds the catalog with sample rooms. Rooms whose name already exists are skipped.

    python -m resort.scripts.seed_rooms
"""
import asyncio
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select

from resort.database import AsyncSessionLocal, init_db
from resort.models import Room, RoomCategory
from resort.schemas.room import RoomCreate, SeasonalDiscount
from resort.services.room_service import RoomService

SAMPLE_ROOMS = [
    RoomCreate(
        name="Hillside Casita",
        description="Secluded casita on the hillside with views over the Sulu Sea.",
        price=Decimal("1200"),
        total_rooms=8,
        max_guests=2,
        category=RoomCategory.CASITA,
        amenities=["King bed", "Outdoor shower", "Private terrace"],
        images=["/images/rooms/hillside-casita.jpg"],
        seasonal_discount=SeasonalDiscount(
            is_active=True,
            percentage=Decimal("15"),
            start_date=datetime(2026, 3, 1),
            end_date=datetime(2026, 5, 31),
        ),
    ),
    RoomCreate(
        name="Beach Casita",
        description="Steps from the white sand beach, with a sun deck and daybed.",
        price=Decimal("1500"),
        total_rooms=12,
        max_guests=3,
        category=RoomCategory.CASITA,
        amenities=["King bed", "Sun deck", "Beach access"],
        images=["/images/rooms/beach-casita.jpg"],
    ),
    RoomCreate(
        name="Treetop Pavilion",
        description="Pavilion raised among the treetops with a plunge pool.",
        price=Decimal("2100"),
        total_rooms=4,
        max_guests=2,
        category=RoomCategory.PAVILION,
        amenities=["Plunge pool", "Outdoor bath"],
        images=["/images/rooms/treetop-pavilion.jpg"],
    ),
    RoomCreate(
        name="Ocean Villa",
        description="Four bedroom villa with a private pool and dedicated staff.",
        price=Decimal("6500"),
        total_rooms=2,
        max_guests=8,
        category=RoomCategory.VILLA,
        amenities=["Private pool", "Butler service", "Kitchen"],
        images=["/images/rooms/ocean-villa.jpg"],
    ),
]


async def seed_rooms():
    await init_db()

    async with AsyncSessionLocal() as session:
        existing = set((await session.execute(select(Room.name))).scalars().all())

        for room_in in SAMPLE_ROOMS:
            if room_in.name in existing:
                print(f"⏭️  {room_in.name} already exists")
                continue
            room = await RoomService.create_room(session, room_in)
            print(f"✅ Created room #{room.id}: {room.name}")


if __name__ == "__main__":
    asyncio.run(seed_rooms())
