from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from resort.api.deps import get_booking_service, get_current_admin
from resort.database import get_db
from resort.models import PaymentStatus
from resort.schemas.booking import AdminBookingOut, BookingStatusUpdate
from resort.schemas.room import RoomCreate, RoomOut, RoomUpdate, SeasonalDiscount
from resort.services.booking_service import BookingService
from resort.services.room_service import RoomService
from resort.utils.dates import to_naive_utc, utcnow

# Every route below requires an authenticated admin
router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


# --- BOOKINGS ---


@router.get("/bookings")
async def list_bookings(
    status: Optional[PaymentStatus] = Query(default=None),
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    search: Optional[str] = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=10),
    db: AsyncSession = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
):
    bookings, pagination = await service.list_bookings(
        db,
        status=status,
        start_date=to_naive_utc(start_date) if start_date else None,
        end_date=to_naive_utc(end_date) if end_date else None,
        search=search,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "data": [AdminBookingOut.model_validate(b) for b in bookings],
        "pagination": pagination,
    }


@router.get("/bookings/stats")
async def booking_stats(
    db: AsyncSession = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
):
    return {"success": True, "data": await service.get_stats(db)}


@router.patch("/bookings/{booking_id}/status")
async def update_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
):
    booking, email_sent = await service.update_status(
        db, booking_id, payload.status, payload.admin_notes
    )
    response = {
        "success": True,
        "message": "Booking status updated",
        "data": AdminBookingOut.model_validate(booking),
    }
    if email_sent is not None:
        response["email_sent"] = email_sent
    return response


@router.get("/stats")
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
):
    return {"success": True, "data": await service.get_dashboard(db)}


# --- ROOMS ---


@router.get("/rooms")
async def list_rooms(db: AsyncSession = Depends(get_db)):
    rooms = await RoomService.list_all_rooms(db)
    now = utcnow()
    return {
        "success": True,
        "count": len(rooms),
        "data": [RoomOut.from_room(room, now) for room in rooms],
    }


@router.post("/rooms", status_code=201)
async def create_room(payload: RoomCreate, db: AsyncSession = Depends(get_db)):
    room = await RoomService.create_room(db, payload)
    return {
        "success": True,
        "message": "Room created successfully",
        "data": RoomOut.from_room(room, utcnow()),
    }


@router.put("/rooms/{room_id}")
async def update_room(room_id: int, payload: RoomUpdate, db: AsyncSession = Depends(get_db)):
    room = await RoomService.update_room(db, room_id, payload)
    return {
        "success": True,
        "message": "Room updated successfully",
        "data": RoomOut.from_room(room, utcnow()),
    }


@router.delete("/rooms/{room_id}")
async def delete_room(room_id: int, db: AsyncSession = Depends(get_db)):
    await RoomService.delete_room(db, room_id)
    return {"success": True, "message": "Room deleted successfully"}


@router.patch("/rooms/{room_id}/discount")
async def update_discount(
    room_id: int, payload: SeasonalDiscount, db: AsyncSession = Depends(get_db)
):
    room = await RoomService.update_discount(db, room_id, payload)
    return {
        "success": True,
        "message": "Seasonal discount updated",
        "data": RoomOut.from_room(room, utcnow()),
    }
