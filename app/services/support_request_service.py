"""Support request service: public submission and admin triage of tickets."""

import logging

from app.models.support_request import SupportRequest, SupportRequestStatus
from app.repositories.support_request_repository import SupportRequestRepository
from app.schemas.common import Page, clamp_pagination
from app.schemas.support_request import (
    CreateSupportRequestRequest,
    SupportRequestResponse,
    UpdateSupportRequestRequest,
)

logger = logging.getLogger(__name__)


class SupportRequestServiceError(Exception):
    """Base for the typed failures of the support request service."""

    default_message = "support request error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidSupportRequestError(SupportRequestServiceError):
    default_message = "invalid request"


class SupportRequestNotFoundError(SupportRequestServiceError):
    """Raised when a support request id does not match a live row."""

    default_message = "support request not found"


class SupportRequestService:
    def __init__(self, repo: SupportRequestRepository) -> None:
        self.repo = repo

    def create(self, req: CreateSupportRequestRequest | None) -> SupportRequestResponse:
        """Persist a new ticket. Status always starts as 'new'."""
        if req is None:
            raise InvalidSupportRequestError()
        row = SupportRequest(
            type=req.type,
            user_email=req.user_email,
            message=req.message,
            platform=req.platform,
            app_version=req.app_version,
            device_model=req.device_model,
            app=req.app,
            status=SupportRequestStatus.NEW,
        )
        self.repo.create(row)
        logger.info(
            "Support request created",
            extra={"support_request_id": row.id, "type": row.type.value, "app": row.app},
        )
        return SupportRequestResponse.model_validate(row)

    def get(self, request_id: int) -> SupportRequestResponse:
        return SupportRequestResponse.model_validate(self._get(request_id))

    def list_paged(self, page: int, page_size: int) -> Page[SupportRequestResponse]:
        page, page_size = clamp_pagination(page, page_size)
        rows, total = self.repo.list_paged((page - 1) * page_size, page_size)
        return Page(
            items=[SupportRequestResponse.model_validate(r) for r in rows],
            total=total,
            page=page,
            page_size=page_size,
        )

    def update(
        self, request_id: int, req: UpdateSupportRequestRequest | None
    ) -> SupportRequestResponse:
        if req is None:
            raise InvalidSupportRequestError()
        row = self._get(request_id)
        if req.status is not None:
            row.status = req.status
        if req.admin_notes is not None:
            row.admin_notes = req.admin_notes
        self.repo.update(row)
        return SupportRequestResponse.model_validate(row)

    def delete(self, request_id: int) -> None:
        if not self.repo.soft_delete(request_id):
            raise SupportRequestNotFoundError()

    def _get(self, request_id: int) -> SupportRequest:
        row = self.repo.get_by_id(request_id)
        if row is None:
            raise SupportRequestNotFoundError()
        return row
