from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from resort.api.deps import get_booking_service
from resort.core.config import settings
from resort.core.rate_limiter import booking_limit
from resort.database import get_db
from resort.schemas.booking import (
    BookingConfirm,
    BookingConfirmed,
    BookingCreate,
    BookingCreated,
    BookingOut,
    ReceiptRequest,
)
from resort.services.booking_service import BookingService
from resort.utils.dates import to_naive_utc

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post("", status_code=status.HTTP_201_CREATED)
@booking_limit
async def create_booking(
    request: Request,
    payload: BookingCreate,
    db: AsyncSession = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
):
    booking = await service.create_booking(db, payload)
    return {
        "success": True,
        "message": (
            "Booking created successfully. Please complete payment within "
            f"{settings.booking_expiration_hours} hours."
        ),
        "data": BookingCreated(
            booking_reference=booking.booking_reference,
            room_name=booking.room.name,
            check_in=booking.check_in,
            check_out=booking.check_out,
            nights=booking.nights,
            total_amount=booking.total_amount,
            expires_at=booking.expires_at,
            payment_status=booking.payment_status,
        ),
    }


@router.post("/confirm")
@booking_limit
async def confirm_booking(
    request: Request,
    payload: BookingConfirm,
    db: AsyncSession = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
):
    booking, email_sent = await service.confirm_booking(
        db, payload.booking_reference, payload.verification_code
    )
    return {
        "success": True,
        "message": "Booking confirmed successfully",
        "data": BookingConfirmed(
            booking_reference=booking.booking_reference,
            guest_name=booking.guest_name,
            room_name=booking.room.name,
            check_in=booking.check_in,
            check_out=booking.check_out,
            total_amount=booking.total_amount,
            payment_status=booking.payment_status,
            confirmed_at=booking.confirmed_at,
            email_sent=email_sent,
        ),
    }


@router.post("/send-receipt")
async def send_receipt(
    payload: ReceiptRequest,
    db: AsyncSession = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
):
    booking, result = await service.send_receipt(
        db, payload.booking_reference, payload.pdf_data
    )
    return {
        "success": True,
        "message": f"Receipt sent successfully to {booking.email}",
        "data": {"message_id": result.message_id, "sent_to": booking.email},
    }


@router.get("/availability/{room_id}")
async def check_availability(
    room_id: int,
    check_in: datetime = Query(...),
    check_out: datetime = Query(...),
    db: AsyncSession = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
):
    availability = await service.check_availability(
        db, room_id, to_naive_utc(check_in), to_naive_utc(check_out)
    )
    return {"success": True, "data": availability}


@router.get("/{reference}")
async def get_booking(
    reference: str,
    db: AsyncSession = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
):
    booking = await service.get_booking_by_reference(db, reference)
    return {"success": True, "data": BookingOut.model_validate(booking)}
