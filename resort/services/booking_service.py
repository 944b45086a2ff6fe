import asyncio
import base64
import binascii
import logging
import math
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from resort.core.config import settings
from resort.core.errors import (
    BookingExpiredError,
    ConflictError,
    DeliveryError,
    NotFoundError,
    ValidationError,
)
from resort.domain.booking_codes import (
    count_nights,
    generate_verification_code,
    next_reference,
    reference_prefix,
)
from resort.domain.pricing import effective_price
from resort.models import ACTIVE_STATUSES, Booking, PaymentStatus, Room
from resort.schemas.booking import (
    Availability,
    BookingCreate,
    BookingStats,
    DashboardStats,
    Pagination,
)
from resort.services.notification_service import (
    NotificationResult,
    NotificationService,
    notification_service,
)
from resort.utils.dates import utcnow
from resort.utils.search import LIKE_ESCAPE, contains_pattern

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5
MAX_PAGE_SIZE = 50


class BookingService:
    """
    Booking lifecycle: availability, creation, confirmation and admin overrides.

    Expiration is lazy: every read path persists the `expired` transition for
    stale `awaiting_payment` bookings before handing them back.
    """

    def __init__(self, notifier: Optional[NotificationService] = None):
        self.notifier = notifier or notification_service
        # Serializes check-then-insert per room within this process only;
        # always taken before _reference_lock
        self._room_locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._reference_lock = asyncio.Lock()
        self._background_tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    async def check_availability(
        self,
        db: AsyncSession,
        room_id: int,
        check_in: datetime,
        check_out: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> Availability:
        """
        Counts awaiting/confirmed bookings overlapping [check_in, check_out).
        A checkout equal to another booking's check-in is not an overlap.
        """
        if check_out <= check_in:
            raise ValidationError("Check-out date must be after check-in date")

        query = select(func.count(Booking.id)).where(
            Booking.room_id == room_id,
            Booking.payment_status.in_(ACTIVE_STATUSES),
            and_(Booking.check_in < check_out, Booking.check_out > check_in),
        )
        if exclude_booking_id:
            query = query.where(Booking.id != exclude_booking_id)

        booked_count = (await db.execute(query)).scalar_one()

        room = await db.get(Room, room_id)
        total_rooms = room.total_rooms if room else 0

        return Availability(
            is_available=booked_count < total_rooms,
            booked_count=booked_count,
            total_rooms=total_rooms,
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_booking(
        self, db: AsyncSession, data: BookingCreate, now: Optional[datetime] = None
    ) -> Booking:
        now = now or utcnow()

        result = await db.execute(
            select(Room).where(Room.id == data.room_id, Room.is_active.is_(True))
        )
        room = result.scalar_one_or_none()
        if not room:
            raise NotFoundError("Room not found or unavailable")

        total_guests = data.guests.adults + data.guests.children
        if total_guests > room.max_guests:
            raise ValidationError(
                f"This room accommodates a maximum of {room.max_guests} guests"
            )

        async with self._room_locks[room.id]:
            availability = await self.check_availability(
                db, room.id, data.check_in, data.check_out
            )
            if not availability.is_available:
                logger.warning(
                    f"Cannot create booking: {data.check_in} - {data.check_out} "
                    f"not available for room {room.id} "
                    f"({availability.booked_count}/{availability.total_rooms} booked)"
                )
                raise ConflictError("Room is not available for the selected dates")

            nights = count_nights(data.check_in, data.check_out)
            # Price is snapshotted here; later price changes never touch it
            total_amount = nights * effective_price(room, now)

            # Reference numbering is process-wide, so allocation through commit
            # runs under one lock shared by all rooms
            async with self._reference_lock:
                booking = Booking(
                    booking_reference=await self._next_reference(db, now.year),
                    verification_code=await self._unique_verification_code(db),
                    room=room,
                    guest_name=data.guest_name,
                    email=data.email,
                    phone=data.phone,
                    check_in=data.check_in,
                    check_out=data.check_out,
                    adults=data.guests.adults,
                    children=data.guests.children,
                    total_amount=total_amount,
                    payment_status=PaymentStatus.AWAITING_PAYMENT,
                    expires_at=now + timedelta(hours=settings.booking_expiration_hours),
                    special_requests=data.special_requests,
                    created_at=now,
                    updated_at=now,
                )
                db.add(booking)
                try:
                    await db.commit()
                except IntegrityError as e:
                    # Another process took the same reference or code
                    await db.rollback()
                    logger.error(f"Booking insert collided: {e}")
                    raise ConflictError("Booking could not be saved, please try again")

        logger.info(
            f"✅ Booking {booking.booking_reference} created for room {room.id} "
            f"({nights} nights, total {total_amount})"
        )

        self._spawn(self._safe_new_booking_notification(booking, room))
        return booking

    async def _next_reference(self, db: AsyncSession, year: int) -> str:
        prefix = reference_prefix(settings.booking_reference_prefix, year)
        stmt = (
            select(Booking.booking_reference)
            .where(
                Booking.booking_reference.startswith(f"{prefix}-", autoescape=True)
            )
            .order_by(Booking.booking_reference.desc())
            .limit(1)
        )
        last_reference = (await db.execute(stmt)).scalar_one_or_none()
        return next_reference(settings.booking_reference_prefix, year, last_reference)

    async def _unique_verification_code(self, db: AsyncSession) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_verification_code()
            stmt = select(Booking.id).where(Booking.verification_code == code)
            if (await db.execute(stmt)).first() is None:
                return code
        raise ConflictError("Could not allocate a verification code, please try again")

    def _spawn(self, coro) -> None:
        """Fire-and-forget; keeps a reference so the task is not collected early"""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _safe_new_booking_notification(self, booking: Booking, room: Room):
        try:
            await self.notifier.send_new_booking_notification(booking, room)
        except Exception as e:
            logger.error(
                f"New booking notification failed for {booking.booking_reference}: {e}",
                exc_info=True,
            )

    # ------------------------------------------------------------------
    # Lookup & lazy expiration
    # ------------------------------------------------------------------

    async def _find_by_reference(self, db: AsyncSession, reference: str) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .options(selectinload(Booking.room))
            .where(Booking.booking_reference == reference.strip().upper())
        )
        return (await db.execute(stmt)).scalar_one_or_none()

    async def _expire_if_stale(
        self, db: AsyncSession, booking: Booking, now: datetime
    ) -> bool:
        if not booking.is_expired(now):
            return False
        booking.mark_expired()
        await db.commit()
        logger.info(f"⌛ Booking {booking.booking_reference} expired")
        return True

    async def get_booking_by_reference(
        self, db: AsyncSession, reference: str, now: Optional[datetime] = None
    ) -> Booking:
        booking = await self._find_by_reference(db, reference)
        if not booking:
            raise NotFoundError("Booking not found")

        await self._expire_if_stale(db, booking, now or utcnow())
        return booking

    async def expire_stale_bookings(
        self, db: AsyncSession, now: Optional[datetime] = None
    ) -> int:
        """Bulk counterpart of the lazy check, used by the optional sweep job"""
        now = now or utcnow()
        stmt = select(Booking).where(
            Booking.payment_status == PaymentStatus.AWAITING_PAYMENT,
            Booking.expires_at < now,
        )
        bookings = (await db.execute(stmt)).scalars().all()
        for booking in bookings:
            booking.mark_expired()

        if bookings:
            await db.commit()
        return len(bookings)

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    async def confirm_booking(
        self,
        db: AsyncSession,
        reference: str,
        verification_code: str,
        now: Optional[datetime] = None,
    ) -> tuple[Booking, bool]:
        """
        Returns the confirmed booking and whether the confirmation email went
        out. The confirmation is committed before the email is attempted.
        """
        now = now or utcnow()

        booking = await self._find_by_reference(db, reference)
        if not booking:
            raise NotFoundError("Booking not found")

        if booking.payment_status == PaymentStatus.CONFIRMED:
            raise ConflictError("This booking has already been confirmed")

        if booking.payment_status == PaymentStatus.CANCELLED:
            raise ConflictError("This booking has been cancelled")

        if booking.payment_status == PaymentStatus.EXPIRED or now > booking.expires_at:
            if booking.payment_status != PaymentStatus.EXPIRED:
                booking.mark_expired()
                await db.commit()
            raise BookingExpiredError(
                "This booking has expired. Please create a new reservation."
            )

        if booking.verification_code != verification_code.strip().upper():
            logger.warning(f"Invalid verification code for {booking.booking_reference}")
            raise ValidationError("Invalid verification code")

        booking.mark_confirmed(now)
        await db.commit()
        logger.info(f"✅ Booking {booking.booking_reference} confirmed")

        result = await self.notifier.send_booking_confirmation(booking, booking.room)
        return booking, result.success

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def list_bookings(
        self,
        db: AsyncSession,
        status: Optional[PaymentStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        now: Optional[datetime] = None,
    ) -> tuple[list[Booking], Pagination]:
        if page < 1:
            raise ValidationError("Page must be a positive integer")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be 1-{MAX_PAGE_SIZE}")

        filters = []
        if status:
            filters.append(Booking.payment_status == status)
        if start_date:
            filters.append(Booking.created_at >= start_date)
        if end_date:
            filters.append(Booking.created_at <= end_date)
        if search:
            like = contains_pattern(search)
            filters.append(
                or_(
                    func.lower(Booking.booking_reference).like(like, escape=LIKE_ESCAPE),
                    func.lower(Booking.email).like(like, escape=LIKE_ESCAPE),
                    func.lower(Booking.guest_name).like(like, escape=LIKE_ESCAPE),
                )
            )

        total = (
            await db.execute(select(func.count(Booking.id)).where(*filters))
        ).scalar_one()

        stmt = (
            select(Booking)
            .options(selectinload(Booking.room))
            .where(*filters)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        bookings = list((await db.execute(stmt)).scalars().all())

        now = now or utcnow()
        expired = [b for b in bookings if b.is_expired(now)]
        for booking in expired:
            booking.mark_expired()
        if expired:
            await db.commit()
            logger.info(f"⌛ Expired {len(expired)} stale bookings while listing")

        pagination = Pagination(
            page=page, limit=limit, total=total, pages=math.ceil(total / limit)
        )
        return bookings, pagination

    async def update_status(
        self,
        db: AsyncSession,
        booking_id: int,
        status: PaymentStatus,
        admin_notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> tuple[Booking, Optional[bool]]:
        """
        Administrative override: any status may be forced, no transition is
        refused. Returns the booking and the confirmation email outcome
        (None when no email was attempted).
        """
        now = now or utcnow()

        stmt = select(Booking).options(selectinload(Booking.room)).where(Booking.id == booking_id)
        booking = (await db.execute(stmt)).scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking not found")

        old_status = booking.payment_status
        booking.payment_status = status
        if admin_notes:
            booking.admin_notes = admin_notes

        if status == PaymentStatus.CONFIRMED:
            booking.mark_confirmed(now)
        elif status == PaymentStatus.EXPIRED:
            booking.mark_expired()

        await db.commit()
        logger.info(
            f"📝 Booking {booking.booking_reference}: "
            f"{old_status.value} -> {status.value} (admin)"
        )

        email_sent = None
        if status == PaymentStatus.CONFIRMED:
            result = await self.notifier.send_booking_confirmation(booking, booking.room)
            email_sent = result.success
        return booking, email_sent

    async def get_stats(self, db: AsyncSession, now: Optional[datetime] = None) -> BookingStats:
        now = now or utcnow()
        counts = await self._count_by_status(db)
        recent = (
            await db.execute(
                select(func.count(Booking.id)).where(
                    Booking.created_at >= now - timedelta(days=30)
                )
            )
        ).scalar_one()

        return BookingStats(
            total_bookings=sum(counts.values()),
            confirmed_bookings=counts.get(PaymentStatus.CONFIRMED, 0),
            pending_bookings=counts.get(PaymentStatus.AWAITING_PAYMENT, 0),
            expired_bookings=counts.get(PaymentStatus.EXPIRED, 0),
            recent_bookings=recent,
            total_revenue=await self._confirmed_revenue(db),
        )

    async def get_dashboard(self, db: AsyncSession) -> DashboardStats:
        total_rooms = (await db.execute(select(func.count(Room.id)))).scalar_one()
        active_rooms = (
            await db.execute(select(func.count(Room.id)).where(Room.is_active.is_(True)))
        ).scalar_one()
        counts = await self._count_by_status(db)

        return DashboardStats(
            total_rooms=total_rooms,
            active_rooms=active_rooms,
            confirmed_bookings=counts.get(PaymentStatus.CONFIRMED, 0),
            pending_bookings=counts.get(PaymentStatus.AWAITING_PAYMENT, 0),
            total_revenue=await self._confirmed_revenue(db),
        )

    async def _count_by_status(self, db: AsyncSession) -> dict[PaymentStatus, int]:
        stmt = select(Booking.payment_status, func.count(Booking.id)).group_by(
            Booking.payment_status
        )
        return {status: count for status, count in (await db.execute(stmt)).all()}

    async def _confirmed_revenue(self, db: AsyncSession) -> Decimal:
        stmt = select(func.coalesce(func.sum(Booking.total_amount), 0)).where(
            Booking.payment_status == PaymentStatus.CONFIRMED
        )
        return Decimal(str((await db.execute(stmt)).scalar_one()))

    # ------------------------------------------------------------------
    # Receipts
    # ------------------------------------------------------------------

    async def send_receipt(
        self, db: AsyncSession, reference: Optional[str], pdf_data: Optional[str]
    ) -> tuple[Booking, NotificationResult]:
        if not reference:
            raise ValidationError("Booking reference is required")
        if not pdf_data:
            raise ValidationError("PDF data is required")

        booking = await self._find_by_reference(db, reference)
        if not booking:
            raise NotFoundError("Booking not found")

        if booking.payment_status != PaymentStatus.CONFIRMED:
            raise ValidationError("Receipt can only be sent for confirmed bookings")

        # Accept both raw base64 and data URLs (data:application/pdf;base64,...)
        encoded = pdf_data.split(",", 1)[1] if pdf_data.startswith("data:") else pdf_data
        try:
            pdf_bytes = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("PDF data must be base64 encoded")

        result = await self.notifier.send_receipt(booking, booking.room, pdf_bytes)
        if not result.success:
            raise DeliveryError(f"Failed to send receipt email: {result.error}")
        return booking, result


booking_service = BookingService()
