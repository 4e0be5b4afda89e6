"""Support request endpoints: public rate-limited submission and admin triage."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.v1.auth import require_admin
from app.core.database import get_db
from app.core.rate_limit import enforce_rate_limit
from app.repositories.support_request_repository import SupportRequestRepository
from app.schemas.auth import CurrentUser
from app.schemas.common import Pagination
from app.schemas.support_request import (
    CreateSupportRequestRequest,
    SupportRequestEnvelope,
    SupportRequestsListResponse,
    UpdateSupportRequestRequest,
)
from app.services.support_request_service import (
    InvalidSupportRequestError,
    SupportRequestNotFoundError,
    SupportRequestService,
)

router = APIRouter()

NOT_FOUND_DETAIL = "Support request not found"


def get_support_request_service(
    db: Annotated[Session, Depends(get_db)],
) -> SupportRequestService:
    return SupportRequestService(SupportRequestRepository(db))


@router.post(
    "/support-request",
    response_model=SupportRequestEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_rate_limit)],
)
def create_support_request(
    body: CreateSupportRequestRequest,
    service: Annotated[SupportRequestService, Depends(get_support_request_service)],
) -> SupportRequestEnvelope:
    """
    Submit a support ticket or feedback from a mobile app. No authentication;
    limited per client address (429 when exceeded).
    """
    try:
        return SupportRequestEnvelope(data=service.create(body))
    except InvalidSupportRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e


@router.get("/support-requests", response_model=SupportRequestsListResponse)
def list_support_requests(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[SupportRequestService, Depends(get_support_request_service)],
    page: int = 1,
    page_size: int = 20,
) -> SupportRequestsListResponse:
    """List support requests newest first (admin only)."""
    result = service.list_paged(page, page_size)
    return SupportRequestsListResponse(data=result.items, pagination=Pagination.from_page(result))


@router.get("/support-requests/{request_id}", response_model=SupportRequestEnvelope)
def get_support_request(
    request_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[SupportRequestService, Depends(get_support_request_service)],
) -> SupportRequestEnvelope:
    try:
        return SupportRequestEnvelope(data=service.get(request_id))
    except SupportRequestNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL) from e


@router.patch("/support-requests/{request_id}", response_model=SupportRequestEnvelope)
def update_support_request(
    request_id: int,
    body: UpdateSupportRequestRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[SupportRequestService, Depends(get_support_request_service)],
) -> SupportRequestEnvelope:
    """Update status and/or admin notes (admin only)."""
    try:
        return SupportRequestEnvelope(data=service.update(request_id, body))
    except SupportRequestNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL) from e
    except InvalidSupportRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e


@router.delete("/support-requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_support_request(
    request_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[SupportRequestService, Depends(get_support_request_service)],
) -> Response:
    try:
        service.delete(request_id)
    except SupportRequestNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
