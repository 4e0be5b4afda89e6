"""Pydantic request/response schemas."""

from app.schemas.auth import (
    ChangePasswordRequest,
    CreateUserRequest,
    CurrentUser,
    LoginRequest,
    LoginResponse,
    UpdateUserRequest,
    UserInfo,
    UsersListResponse,
)
from app.schemas.common import MessageResponse, Page, Pagination
from app.schemas.health import HealthResponse
from app.schemas.support_request import (
    CreateSupportRequestRequest,
    SupportRequestResponse,
    SupportRequestsListResponse,
    UpdateSupportRequestRequest,
)

__all__ = [
    "ChangePasswordRequest",
    "CreateSupportRequestRequest",
    "CreateUserRequest",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "Page",
    "Pagination",
    "SupportRequestResponse",
    "SupportRequestsListResponse",
    "UpdateSupportRequestRequest",
    "UpdateUserRequest",
    "UserInfo",
    "UsersListResponse",
]
