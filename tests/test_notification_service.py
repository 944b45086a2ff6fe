"""
Email rendering and delivery tests (SMTP is never contacted)
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from resort.core.config import settings
from resort.models import Booking, PaymentStatus
from resort.services.notification_service import NotificationService

from conftest import NOW, make_room


@pytest.fixture
def room():
    room = make_room()
    room.id = 1
    return room


@pytest.fixture
def booking(room):
    return Booking(
        booking_reference="AMAN-2026-00045",
        verification_code="A1B2C3D4",
        room_id=room.id,
        guest_name="Maria Santos",
        email="maria@example.com",
        phone="+63 917 555 0101",
        check_in=datetime(2026, 3, 10, 14),
        check_out=datetime(2026, 3, 15, 12),
        adults=2,
        children=1,
        total_amount=Decimal("5100"),
        payment_status=PaymentStatus.AWAITING_PAYMENT,
        expires_at=NOW + timedelta(hours=6),
        special_requests="Late arrival",
    )


@pytest.fixture
def sent(monkeypatch):
    """Captures messages instead of opening an SMTP connection"""
    messages = []

    def fake_send(self, message):
        messages.append(message)
        return message["Message-ID"]

    monkeypatch.setattr(settings, "smtp_host", "smtp.test")
    monkeypatch.setattr(NotificationService, "_send_sync", fake_send)
    return messages


def test_new_booking_email_contains_code(booking, room, monkeypatch):
    monkeypatch.setattr(settings, "admin_notification_email", "ops@amanpulo.com")
    message = NotificationService()._build_message(
        "ops@amanpulo.com", "New Booking", "new_booking", booking=booking, room=room
    )

    text = message.get_body(preferencelist=("plain",)).get_content()
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "AMAN-2026-00045" in text
    assert "A1B2C3D4" in html
    assert "5,100.00" in text


@pytest.mark.asyncio
async def test_confirmation_delivered(booking, room, sent):
    result = await NotificationService().send_booking_confirmation(booking, room)

    assert result.success is True
    assert result.message_id
    assert sent[0]["To"] == "maria@example.com"
    assert "AMAN-2026-00045" in sent[0]["Subject"]


@pytest.mark.asyncio
async def test_receipt_has_pdf_attachment(booking, room, sent):
    result = await NotificationService().send_receipt(booking, room, b"%PDF-1.4")

    assert result.success is True
    attachments = list(sent[0].iter_attachments())
    assert attachments[0].get_filename() == "Receipt-AMAN-2026-00045.pdf"
    assert attachments[0].get_content_type() == "application/pdf"


@pytest.mark.asyncio
async def test_operator_notice_skipped_without_inbox(booking, room, sent, monkeypatch):
    monkeypatch.setattr(settings, "admin_notification_email", "")

    result = await NotificationService().send_new_booking_notification(booking, room)

    assert result.success is False
    assert sent == []


@pytest.mark.asyncio
async def test_unconfigured_smtp_reports_failure(booking, room, monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", "")

    result = await NotificationService().send_booking_confirmation(booking, room)

    assert result.success is False
    assert "not configured" in result.error


@pytest.mark.asyncio
async def test_smtp_error_reports_failure(booking, room, monkeypatch):
    def broken(self, message):
        raise OSError("connection refused")

    monkeypatch.setattr(settings, "smtp_host", "smtp.test")
    monkeypatch.setattr(NotificationService, "_send_sync", broken)

    result = await NotificationService().send_booking_confirmation(booking, room)

    assert result.success is False
    assert "connection refused" in result.error
