import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resort.core.errors import UnauthorizedError
from resort.core.security import create_access_token, get_password_hash, verify_password
from resort.models import Admin, AdminRole
from resort.utils.dates import utcnow

logger = logging.getLogger(__name__)


class AuthService:
    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[Admin]:
        result = await db.execute(select(Admin).where(Admin.email == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    def issue_token(admin: Admin) -> str:
        return create_access_token(data={"sub": str(admin.id), "role": admin.role.value})

    @staticmethod
    async def login(db: AsyncSession, email: str, password: str) -> tuple[Admin, str]:
        admin = await AuthService.get_by_email(db, email)

        if not admin:
            raise UnauthorizedError("Invalid email or password")
        if not admin.is_active:
            raise UnauthorizedError("Account is deactivated. Please contact support.")
        if not verify_password(password, admin.hashed_password):
            logger.warning(f"Failed login attempt for {admin.email}")
            raise UnauthorizedError("Invalid email or password")

        admin.last_login = utcnow()
        await db.commit()
        logger.info(f"🔐 Admin {admin.email} logged in")
        return admin, AuthService.issue_token(admin)

    @staticmethod
    async def update_password(
        db: AsyncSession, admin: Admin, current_password: str, new_password: str
    ) -> str:
        if not verify_password(current_password, admin.hashed_password):
            raise UnauthorizedError("Current password is incorrect")

        admin.hashed_password = get_password_hash(new_password)
        await db.commit()
        logger.info(f"🔐 Password updated for {admin.email}")
        return AuthService.issue_token(admin)

    @staticmethod
    async def create_admin(
        db: AsyncSession,
        email: str,
        password: str,
        name: str = "Owner",
        role: AdminRole = AdminRole.OWNER,
    ) -> Admin:
        admin = Admin(
            email=email.strip().lower(),
            hashed_password=get_password_hash(password),
            name=name,
            role=role,
            is_active=True,
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        return admin
