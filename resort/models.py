from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from resort.database import Base
from resort.utils.dates import utcnow


class RoomCategory(str, Enum):
    VILLA = "villa"
    CASITA = "casita"
    PAVILION = "pavilion"
    SUITE = "suite"


class PaymentStatus(str, Enum):
    AWAITING_PAYMENT = "awaiting_payment"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


# Statuses that hold inventory for availability checks
ACTIVE_STATUSES = (PaymentStatus.AWAITING_PAYMENT, PaymentStatus.CONFIRMED)


class AdminRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), index=True)
    description: Mapped[str] = mapped_column(String(2000))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), index=True)
    total_rooms: Mapped[int] = mapped_column(Integer, default=1)
    max_guests: Mapped[int] = mapped_column(Integer, default=2)
    category: Mapped[RoomCategory] = mapped_column(
        SQLEnum(RoomCategory), default=RoomCategory.VILLA, index=True
    )
    amenities: Mapped[list] = mapped_column(JSON, default=list)
    images: Mapped[list] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    # Сезонная скидка
    discount_active: Mapped[bool] = mapped_column(Boolean, default=False)
    discount_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    discount_start: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    discount_end: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    bookings: Mapped[list["Booking"]] = relationship(back_populates="room")


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    booking_reference: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    # NULL once confirmed/expired; unique only among present values
    verification_code: Mapped[Optional[str]] = mapped_column(
        String(16), unique=True, index=True, nullable=True
    )

    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id"), index=True)
    room: Mapped["Room"] = relationship(back_populates="bookings")

    # Данные гостя
    guest_name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(254), index=True)
    phone: Mapped[str] = mapped_column(String(32))

    # Детали брони
    check_in: Mapped[datetime] = mapped_column(DateTime, index=True)
    check_out: Mapped[datetime] = mapped_column(DateTime, index=True)
    adults: Mapped[int] = mapped_column(Integer, default=1)
    children: Mapped[int] = mapped_column(Integer, default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    payment_status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus), default=PaymentStatus.AWAITING_PAYMENT, index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, index=True)
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    special_requests: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    @property
    def nights(self) -> int:
        from resort.domain.booking_codes import count_nights

        return count_nights(self.check_in, self.check_out)

    @property
    def total_guests(self) -> int:
        return (self.adults or 0) + (self.children or 0)

    def is_expired(self, now: datetime) -> bool:
        return (
            self.payment_status == PaymentStatus.AWAITING_PAYMENT
            and now > self.expires_at
        )

    def mark_confirmed(self, now: datetime) -> None:
        self.payment_status = PaymentStatus.CONFIRMED
        self.verification_code = None
        self.confirmed_at = now

    def mark_expired(self) -> None:
        self.payment_status = PaymentStatus.EXPIRED
        self.verification_code = None


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String)
    name: Mapped[str] = mapped_column(String(100), default="Owner")
    role: Mapped[AdminRole] = mapped_column(SQLEnum(AdminRole), default=AdminRole.OWNER)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
