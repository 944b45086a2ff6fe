"""
Periodic sweep that expires unpaid bookings past their deadline.

Read paths already expire bookings lazily; the sweep only keeps bookings
that nobody reads from sitting in `awaiting_payment` forever.
"""
import logging

logger = logging.getLogger(__name__)


async def expire_stale_bookings_job():
    try:
        from resort.database import AsyncSessionLocal
        from resort.services.booking_service import booking_service

        async with AsyncSessionLocal() as session:
            expired = await booking_service.expire_stale_bookings(session)

        if expired:
            logger.info(f"⌛ Expiration sweep: {expired} bookings expired")
        else:
            logger.debug("Expiration sweep: nothing to expire")

    except Exception as e:
        logger.error(f"❌ Expiration sweep failed: {e}", exc_info=True)
