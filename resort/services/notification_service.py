"""
Transactional email over SMTP.

Every send returns a NotificationResult instead of raising: callers decide
whether a failed delivery matters, and booking state is never rolled back
because of it.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from resort.core.config import settings
from resort.models import Booking, Room

logger = logging.getLogger(__name__)

templates = Environment(
    loader=PackageLoader("resort", "templates/email"),
    autoescape=select_autoescape(["html"]),
)


def format_date(value) -> str:
    """Monday, March 15, 2026"""
    if not value:
        return ""
    return value.strftime("%A, %B %d, %Y").replace(" 0", " ")


def format_money(value) -> str:
    return f"{value:,.2f}"


templates.filters["format_date"] = format_date
templates.filters["format_money"] = format_money


@dataclass
class NotificationResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class NotificationService:
    """Сервис отправки писем гостям и администратору"""

    def _render(self, name: str, **context) -> tuple[str, str]:
        context.setdefault("project_name", settings.project_name)
        text = templates.get_template(f"{name}.txt").render(**context)
        html = templates.get_template(f"{name}.html").render(**context)
        return text, html

    def _build_message(
        self, to: str, subject: str, template: str, **context
    ) -> EmailMessage:
        text, html = self._render(template, **context)

        message = EmailMessage()
        message["From"] = settings.email_from
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    def _send_sync(self, message: EmailMessage) -> str:
        """Blocking SMTP delivery; run it through asyncio.to_thread"""
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_user:
                server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(message)
        return message["Message-ID"]

    async def _deliver(self, message: EmailMessage, label: str) -> NotificationResult:
        if not settings.smtp_host:
            logger.warning(f"SMTP host is not configured, {label} not sent")
            return NotificationResult(success=False, error="SMTP is not configured")

        try:
            message_id = await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"❌ {label} failed for {message['To']}: {e}", exc_info=True)
            return NotificationResult(success=False, error=str(e))

        logger.info(f"✉️ {label} sent to {message['To']}: {message_id}")
        return NotificationResult(success=True, message_id=message_id)

    async def send_booking_confirmation(
        self, booking: Booking, room: Room
    ) -> NotificationResult:
        message = self._build_message(
            booking.email,
            f"Reservation Confirmed - {booking.booking_reference}",
            "booking_confirmed",
            booking=booking,
            room=room,
        )
        return await self._deliver(message, "Confirmation email")

    async def send_new_booking_notification(
        self, booking: Booking, room: Room
    ) -> NotificationResult:
        if not settings.admin_notification_email:
            logger.info("No operator inbox configured, skipping new booking notice")
            return NotificationResult(success=False, error="No operator inbox configured")

        message = self._build_message(
            settings.admin_notification_email,
            f"New Booking - {booking.booking_reference}",
            "new_booking",
            booking=booking,
            room=room,
        )
        return await self._deliver(message, "Operator notification")

    async def send_receipt(
        self, booking: Booking, room: Room, pdf_bytes: bytes
    ) -> NotificationResult:
        message = self._build_message(
            booking.email,
            f"Booking Confirmation – {booking.booking_reference} | {settings.project_name}",
            "receipt",
            booking=booking,
            room=room,
        )
        message.add_attachment(
            pdf_bytes,
            maintype="application",
            subtype="pdf",
            filename=f"Receipt-{booking.booking_reference}.pdf",
        )
        return await self._deliver(message, "Receipt email")


notification_service = NotificationService()
