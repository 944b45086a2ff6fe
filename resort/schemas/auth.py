from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from resort.models import AdminRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class PasswordUpdate(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class AdminOut(BaseModel):
    id: int
    email: str
    name: str
    role: AdminRole
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TokenOut(AdminOut):
    token: str
