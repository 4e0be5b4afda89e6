"""Persistence of SupportRequest rows with soft-delete filtering."""

from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.models.support_request import SupportRequest


class SupportRequestRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _live(self) -> Query:
        return self.session.query(SupportRequest).filter(SupportRequest.deleted_at.is_(None))

    def create(self, request: SupportRequest) -> SupportRequest:
        self.session.add(request)
        self._commit()
        self.session.refresh(request)
        return request

    def get_by_id(self, request_id: int) -> SupportRequest | None:
        return self._live().filter(SupportRequest.id == request_id).first()

    def list_paged(self, offset: int, limit: int) -> tuple[list[SupportRequest], int]:
        total = self._live().count()
        rows = (
            self._live()
            .order_by(SupportRequest.created_at.desc(), SupportRequest.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return rows, total

    def update(self, request: SupportRequest) -> SupportRequest:
        self._commit()
        self.session.refresh(request)
        return request

    def soft_delete(self, request_id: int) -> bool:
        updated = (
            self._live()
            .filter(SupportRequest.id == request_id)
            .update({SupportRequest.deleted_at: datetime.now(UTC)}, synchronize_session=False)
        )
        self._commit()
        return updated > 0

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
