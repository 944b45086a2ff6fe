from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from resort.core.errors import UnauthorizedError
from resort.core.security import decode_access_token
from resort.database import get_db
from resort.models import Admin
from resort.services.booking_service import BookingService, booking_service

bearer_scheme = HTTPBearer(auto_error=False)


def get_booking_service() -> BookingService:
    return booking_service


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    """
    Resolves the admin from the `Authorization: Bearer <token>` header.
    Every failure is reported as the same 401.
    """
    if not credentials:
        raise UnauthorizedError("Not authorized to access this route")

    payload = decode_access_token(credentials.credentials)
    if not payload or payload.get("sub") is None:
        raise UnauthorizedError("Not authorized to access this route")

    try:
        admin_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Not authorized to access this route")

    admin = await db.get(Admin, admin_id)
    if not admin:
        raise UnauthorizedError("Admin not found")
    if not admin.is_active:
        raise UnauthorizedError("Account is deactivated")

    return admin
