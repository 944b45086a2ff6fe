import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from resort.api.deps import get_current_admin
from resort.database import get_db
from resort.models import Admin
from resort.schemas.auth import AdminOut, LoginRequest, PasswordUpdate, TokenOut
from resort.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    admin, token = await AuthService.login(db, payload.email, payload.password)
    data = TokenOut(**AdminOut.model_validate(admin).model_dump(), token=token)
    return {"success": True, "data": data}


@router.get("/me")
async def me(admin: Admin = Depends(get_current_admin)):
    return {"success": True, "data": AdminOut.model_validate(admin)}


@router.put("/password")
async def update_password(
    payload: PasswordUpdate,
    admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    token = await AuthService.update_password(
        db, admin, payload.current_password, payload.new_password
    )
    return {"success": True, "message": "Password updated successfully", "token": token}


@router.post("/logout")
async def logout(admin: Admin = Depends(get_current_admin)):
    # Tokens are stateless; the client drops it
    logger.info(f"Admin {admin.email} logged out")
    return {"success": True, "message": "Logged out successfully"}
