"""Credential store: persistence of User rows with soft-delete filtering."""

from datetime import UTC, datetime

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.models.user import User


class UserRepository:
    """
    All lookups exclude tombstoned rows (deleted_at set).

    Write methods commit; on failure they roll back and re-raise so the
    session stays usable for the rest of the request.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _live(self) -> Query:
        return self.session.query(User).filter(User.deleted_at.is_(None))

    def create(self, user: User) -> User:
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

    def get_by_id(self, user_id: int) -> User | None:
        return self._live().filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> User | None:
        return self._live().filter(User.username == username).first()

    def get_by_email(self, email: str) -> User | None:
        return self._live().filter(User.email == email).first()

    def list_paged(self, offset: int, limit: int) -> tuple[list[User], int]:
        """Return (users newest first, total live users)."""
        total = self._live().count()
        users = (
            self._live()
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return users, total

    def update(self, user: User) -> User:
        self._commit()
        self.session.refresh(user)
        return user

    def touch_last_login(self, user_id: int) -> None:
        self._live().filter(User.id == user_id).update(
            {User.last_login_at: datetime.now(UTC)},
            synchronize_session=False,
        )
        self._commit()

    def soft_delete(self, user_id: int) -> bool:
        """Tombstone the user; returns False when no live row matched."""
        updated = (
            self._live()
            .filter(User.id == user_id)
            .update({User.deleted_at: datetime.now(UTC)}, synchronize_session=False)
        )
        self._commit()
        return updated > 0

    def exists_by_username_or_email(self, username: str, email: str) -> bool:
        return (
            self._live()
            .filter(or_(User.username == username, User.email == email))
            .count()
            > 0
        )

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
