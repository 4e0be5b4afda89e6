"""ORM model for support tickets and feedback submitted from the mobile apps."""

import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String, Text, func

from app.models.base import Base


class SupportRequestType(str, enum.Enum):
    SUPPORT = "support"
    FEEDBACK = "feedback"
    BUG_REPORT = "bug_report"
    FEATURE_REQUEST = "feature_request"


class Platform(str, enum.Enum):
    IOS = "iOS"
    ANDROID = "Android"
    WEB = "Web"


class SupportRequestStatus(str, enum.Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


def _values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class SupportRequest(Base):
    """
    One ticket or feedback item. Created by the public endpoint with status
    'new'; triaged by admins via status and admin_notes.
    """

    __tablename__ = "support_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(
        Enum(
            SupportRequestType,
            name="support_request_type",
            native_enum=False,
            length=20,
            values_callable=_values,
        ),
        nullable=False,
        index=True,
    )
    user_email = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    platform = Column(
        Enum(
            Platform,
            name="platform",
            native_enum=False,
            length=20,
            values_callable=_values,
        ),
        nullable=False,
        index=True,
    )
    app_version = Column(String(50), nullable=False)
    device_model = Column(String(100), nullable=False)
    app = Column(String(100), nullable=False, index=True)
    status = Column(
        Enum(
            SupportRequestStatus,
            name="support_request_status",
            native_enum=False,
            length=20,
            values_callable=_values,
        ),
        nullable=False,
        default=SupportRequestStatus.NEW,
        index=True,
    )
    admin_notes = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
