"""ORM model for application users (auth and RBAC)."""

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, func

from app.models.base import Base


class UserRole(str, enum.Enum):
    """Closed set of roles used by the authorization gates."""

    ADMIN = "admin"
    USER = "user"


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    Rows with deleted_at set are tombstones: repositories never return them,
    but they still occupy their username and email.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(
            UserRole,
            name="user_role",
            native_enum=False,
            length=32,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=UserRole.USER,
        index=True,
    )
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
