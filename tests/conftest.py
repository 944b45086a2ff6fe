"""
Pytest configuration for reservation tests
"""
import itertools
import os
import sys
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio

# Must be set before resort.core.config is imported
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("ADMIN_NOTIFICATION_EMAIL", "")
os.environ.setdefault("BOOKING_REFERENCE_PREFIX", "AMAN")
os.environ.setdefault("BOOKING_EXPIRATION_HOURS", "6")

# Ensure resort is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

from resort.database import Base  # noqa: E402
from resort.models import Booking, PaymentStatus, Room, RoomCategory  # noqa: E402
from resort.services.booking_service import BookingService  # noqa: E402
from resort.services.notification_service import NotificationResult  # noqa: E402

# Inside the Hillside Casita discount window
NOW = datetime(2026, 3, 2, 12, 0)

# Fixture bookings use a year the service never numbers into
_reference_numbers = itertools.count(1)


class FakeNotifier:
    """Records every send instead of talking to SMTP"""

    def __init__(self, success: bool = True):
        self.success = success
        self.sent = []

    def _result(self, kind, booking):
        self.sent.append((kind, booking.booking_reference))
        if self.success:
            return NotificationResult(success=True, message_id=f"<{kind}@test>")
        return NotificationResult(success=False, error="SMTP down")

    async def send_booking_confirmation(self, booking, room):
        return self._result("confirmation", booking)

    async def send_new_booking_notification(self, booking, room):
        return self._result("new_booking", booking)

    async def send_receipt(self, booking, room, pdf_bytes):
        return self._result("receipt", booking)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest_asyncio.fixture
async def service(notifier):
    service = BookingService(notifier=notifier)
    yield service
    # Let fire-and-forget notifications finish before the loop closes
    for task in list(service._background_tasks):
        await task


def make_room(**overrides) -> Room:
    data = dict(
        name="Hillside Casita",
        description="Secluded casita on the hillside",
        price=Decimal("1200"),
        total_rooms=8,
        max_guests=2,
        category=RoomCategory.CASITA,
        amenities=["King bed"],
        images=["/images/hillside.jpg"],
        is_active=True,
        discount_active=True,
        discount_percentage=Decimal("15"),
        discount_start=datetime(2026, 3, 1),
        discount_end=datetime(2026, 5, 31),
    )
    data.update(overrides)
    return Room(**data)


def make_booking(room: Room, check_in: datetime, check_out: datetime, **overrides) -> Booking:
    data = dict(
        booking_reference=f"AMAN-2025-{next(_reference_numbers):05d}",
        room_id=room.id,
        guest_name="Maria Santos",
        email="maria@example.com",
        phone="+63 917 555 0101",
        check_in=check_in,
        check_out=check_out,
        adults=2,
        children=0,
        total_amount=Decimal("1000"),
        payment_status=PaymentStatus.AWAITING_PAYMENT,
        expires_at=NOW + timedelta(hours=6),
    )
    data.update(overrides)
    return Booking(**data)


@pytest_asyncio.fixture
async def room(session):
    room = make_room()
    session.add(room)
    await session.commit()
    return room


@pytest.fixture
def booking_payload():
    """Sample data for booking creation"""
    return {
        "room_id": 1,
        "guest_name": "Maria Santos",
        "email": "Maria@Example.com",
        "phone": "+63 917 555 0101",
        "check_in": "2026-03-10T14:00:00",
        "check_out": "2026-03-15T12:00:00",
        "guests": {"adults": 2, "children": 0},
        "special_requests": "Late arrival",
    }
