"""
Per-client request limits for the public booking endpoints.

Routers import `booking_limit` instead of building their own limits, so
creation and confirmation share one budget setting.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from resort.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)

# Guests creating or confirming reservations, keyed by client IP
booking_limit = limiter.limit(settings.rate_limit_bookings)
