from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from resort.database import get_db
from resort.models import RoomCategory
from resort.schemas.room import RoomOut
from resort.services.room_service import RoomService
from resort.utils.dates import utcnow

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@router.get("")
async def list_rooms(
    category: Optional[RoomCategory] = Query(default=None),
    min_price: Optional[Decimal] = Query(default=None, ge=0),
    max_price: Optional[Decimal] = Query(default=None, ge=0),
    guests: Optional[int] = Query(default=None, ge=1),
    search: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    rooms = await RoomService.list_rooms(
        db,
        category=category,
        min_price=min_price,
        max_price=max_price,
        guests=guests,
        search=search,
    )
    now = utcnow()
    return {
        "success": True,
        "count": len(rooms),
        "data": [RoomOut.from_room(room, now) for room in rooms],
    }


@router.get("/{room_id}")
async def get_room(room_id: int, db: AsyncSession = Depends(get_db)):
    room = await RoomService.get_room(db, room_id)
    return {"success": True, "data": RoomOut.from_room(room, utcnow())}
