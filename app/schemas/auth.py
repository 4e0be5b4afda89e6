"""Request/response schemas for auth and user management endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole
from app.schemas.common import Pagination

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class CreateUserRequest(BaseModel):
    """Payload for creating a user (admin only)."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: UserRole


class UpdateUserRequest(BaseModel):
    """Partial update; omitted or null fields are left untouched."""

    email: EmailStr | None = None
    role: UserRole | None = None
    is_active: bool | None = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class UserInfo(BaseModel):
    """Public profile (never includes the password hash)."""

    id: int
    username: str
    email: str
    role: UserRole
    is_active: bool

    class Config:
        from_attributes = True


class CurrentUser(BaseModel):
    """Authenticated identity (id, username, role) for dependency injection."""

    id: int
    username: str
    role: UserRole

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    """JWT access token returned after successful login."""

    token: str = Field(..., description="JWT access token; send as Authorization: Bearer <token>")
    expires_at: datetime
    user: UserInfo


class LoginEnvelope(BaseModel):
    data: LoginResponse


class UserEnvelope(BaseModel):
    data: UserInfo


class UsersListResponse(BaseModel):
    """Response for GET /auth/users (admin only)."""

    data: list[UserInfo]
    pagination: Pagination
