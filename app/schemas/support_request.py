"""Pydantic schemas for support requests submitted by the mobile apps."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.support_request import Platform, SupportRequestStatus, SupportRequestType
from app.schemas.common import Pagination

MESSAGE_MAX_LENGTH = 10_000
ADMIN_NOTES_MAX_LENGTH = 10_000


class CreateSupportRequestRequest(BaseModel):
    """Request body for POST /support-request (public, rate limited)."""

    type: SupportRequestType = Field(..., description="support, feedback, bug_report or feature_request")
    user_email: EmailStr | None = Field(default=None, description="Optional contact email")
    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH)
    platform: Platform = Field(..., description="iOS, Android or Web")
    app_version: str = Field(..., min_length=1, max_length=50, examples=["1.2.3"])
    device_model: str = Field(..., min_length=1, max_length=100, examples=["iPhone 14 Pro"])
    app: str = Field(..., min_length=1, max_length=100, examples=["my-awesome-app"])

    @field_validator("message", "app_version", "device_model", "app")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class UpdateSupportRequestRequest(BaseModel):
    """Triage update; omitted or null fields are left untouched."""

    status: SupportRequestStatus | None = None
    admin_notes: str | None = Field(default=None, max_length=ADMIN_NOTES_MAX_LENGTH)


class SupportRequestResponse(BaseModel):
    id: int
    type: SupportRequestType
    user_email: str | None = None
    message: str
    platform: Platform
    app_version: str
    device_model: str
    app: str
    status: SupportRequestStatus
    admin_notes: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SupportRequestEnvelope(BaseModel):
    data: SupportRequestResponse


class SupportRequestsListResponse(BaseModel):
    data: list[SupportRequestResponse]
    pagination: Pagination
