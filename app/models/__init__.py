"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.support_request import (
    Platform,
    SupportRequest,
    SupportRequestStatus,
    SupportRequestType,
)
from app.models.user import User, UserRole

__all__ = [
    "Base",
    "Platform",
    "SupportRequest",
    "SupportRequestStatus",
    "SupportRequestType",
    "User",
    "UserRole",
]
