from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from hiring_engine.core.schemas import CamelModel, PageMeta
from hiring_engine.models.user import UserRole


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: Optional[str] = None
    company: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class UserResponse(CamelModel):
    id: int
    email: EmailStr
    full_name: Optional[str] = None
    company: Optional[str] = None
    role: UserRole
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TokenResponse(CamelModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class CurrentUserResponse(CamelModel):
    success: bool = True
    user: UserResponse


class UserStatusUpdate(CamelModel):
    is_active: bool


class UserListResponse(PageMeta):
    users: List[UserResponse]
