"""Data-mapper repositories over the SQLAlchemy session."""

from app.repositories.support_request_repository import SupportRequestRepository
from app.repositories.user_repository import UserRepository

__all__ = ["SupportRequestRepository", "UserRepository"]
