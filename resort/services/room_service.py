from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from resort.core.errors import NotFoundError, ValidationError
from resort.models import Room, RoomCategory
from resort.schemas.room import RoomCreate, RoomUpdate, SeasonalDiscount
from resort.utils.search import LIKE_ESCAPE, contains_pattern


def _apply_discount(room: Room, discount: SeasonalDiscount) -> None:
    if (
        discount.start_date
        and discount.end_date
        and discount.end_date < discount.start_date
    ):
        raise ValidationError("Discount end date must be after start date")

    room.discount_active = discount.is_active
    room.discount_percentage = discount.percentage
    room.discount_start = discount.start_date
    room.discount_end = discount.end_date


class RoomService:
    @staticmethod
    async def list_rooms(
        db: AsyncSession,
        category: Optional[RoomCategory] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        guests: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[Room]:
        """Active rooms for the public catalog, cheapest first"""
        stmt = select(Room).where(Room.is_active.is_(True))

        if category:
            stmt = stmt.where(Room.category == category)
        if min_price is not None:
            stmt = stmt.where(Room.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Room.price <= max_price)
        if guests:
            stmt = stmt.where(Room.max_guests >= guests)
        if search:
            like = contains_pattern(search)
            stmt = stmt.where(
                or_(
                    func.lower(Room.name).like(like, escape=LIKE_ESCAPE),
                    func.lower(Room.description).like(like, escape=LIKE_ESCAPE),
                )
            )

        result = await db.execute(stmt.order_by(Room.price, Room.id))
        return list(result.scalars().all())

    @staticmethod
    async def list_all_rooms(db: AsyncSession) -> List[Room]:
        """Admin view, inactive rooms included"""
        result = await db.execute(select(Room).order_by(Room.created_at.desc(), Room.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_room(db: AsyncSession, room_id: int) -> Room:
        room = await db.get(Room, room_id)
        if not room:
            raise NotFoundError("Room not found")
        return room

    @staticmethod
    async def create_room(db: AsyncSession, room_in: RoomCreate) -> Room:
        data = room_in.model_dump(exclude={"seasonal_discount"})
        room = Room(**data)
        if room_in.seasonal_discount:
            _apply_discount(room, room_in.seasonal_discount)

        db.add(room)
        await db.commit()
        await db.refresh(room)
        return room

    @staticmethod
    async def update_room(db: AsyncSession, room_id: int, room_in: RoomUpdate) -> Room:
        room = await RoomService.get_room(db, room_id)

        # model_dump(exclude_unset=True) keeps partial updates from nulling fields
        update_data = room_in.model_dump(exclude_unset=True, exclude={"seasonal_discount"})
        for key, value in update_data.items():
            if value is None:
                continue
            setattr(room, key, value)

        if room_in.seasonal_discount is not None:
            _apply_discount(room, room_in.seasonal_discount)

        await db.commit()
        await db.refresh(room)
        return room

    @staticmethod
    async def delete_room(db: AsyncSession, room_id: int) -> Room:
        """Soft delete: bookings keep pointing at the room"""
        room = await RoomService.get_room(db, room_id)
        room.is_active = False
        await db.commit()
        await db.refresh(room)
        return room

    @staticmethod
    async def update_discount(
        db: AsyncSession, room_id: int, discount: SeasonalDiscount
    ) -> Room:
        room = await RoomService.get_room(db, room_id)
        _apply_discount(room, discount)
        await db.commit()
        await db.refresh(room)
        return room
