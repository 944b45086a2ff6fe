from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from resort.models import PaymentStatus
from resort.schemas.common import Money
from resort.schemas.room import RoomSummary
from resort.utils.dates import to_naive_utc


class GuestCounts(BaseModel):
    adults: int = Field(ge=1)
    children: int = Field(default=0, ge=0)


class BookingCreate(BaseModel):
    room_id: int
    guest_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=32)
    check_in: datetime
    check_out: datetime
    guests: GuestCounts
    special_requests: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("guest_name", "phone")
    @classmethod
    def strip_text(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str):
        return v.lower()

    @field_validator("check_in", "check_out")
    @classmethod
    def normalize_dates(cls, v: datetime):
        return to_naive_utc(v)

    @field_validator("check_out")
    @classmethod
    def validate_dates(cls, v: datetime, info):
        check_in = info.data.get("check_in")
        if check_in and v <= check_in:
            raise ValueError("Check-out date must be after check-in date")
        return v


class BookingConfirm(BaseModel):
    booking_reference: str = Field(min_length=1)
    verification_code: str = Field(min_length=1)

    @field_validator("booking_reference", "verification_code")
    @classmethod
    def strip_text(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ReceiptRequest(BaseModel):
    # Presence is checked by the service so the error kind matches the other 400s
    booking_reference: Optional[str] = None
    pdf_data: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: PaymentStatus
    admin_notes: Optional[str] = Field(default=None, max_length=1000)


class Availability(BaseModel):
    is_available: bool
    booked_count: int
    total_rooms: int


class BookingCreated(BaseModel):
    booking_reference: str
    room_name: str
    check_in: datetime
    check_out: datetime
    nights: int
    total_amount: Money
    expires_at: datetime
    payment_status: PaymentStatus


class BookingConfirmed(BaseModel):
    booking_reference: str
    guest_name: str
    room_name: str
    check_in: datetime
    check_out: datetime
    total_amount: Money
    payment_status: PaymentStatus
    confirmed_at: Optional[datetime] = None
    email_sent: bool


class BookingOut(BaseModel):
    """Guest-facing view; the verification code is never exposed here"""

    id: int
    booking_reference: str
    room_id: int
    room: Optional[RoomSummary] = None
    guest_name: str
    email: str
    phone: str
    check_in: datetime
    check_out: datetime
    adults: int
    children: int
    nights: int
    total_guests: int
    total_amount: Money
    payment_status: PaymentStatus
    expires_at: datetime
    confirmed_at: Optional[datetime] = None
    special_requests: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminBookingOut(BookingOut):
    verification_code: Optional[str] = None
    admin_notes: Optional[str] = None
    updated_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class BookingStats(BaseModel):
    total_bookings: int
    confirmed_bookings: int
    pending_bookings: int
    expired_bookings: int
    recent_bookings: int
    total_revenue: Money


class DashboardStats(BaseModel):
    total_rooms: int
    active_rooms: int
    confirmed_bookings: int
    pending_bookings: int
    total_revenue: Money
