"""JWT login, user management and auth dependencies (get_current_user, require_admin)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import UserRole
from app.repositories.user_repository import UserRepository
from app.schemas.auth import (
    ChangePasswordRequest,
    CreateUserRequest,
    CurrentUser,
    LoginEnvelope,
    LoginRequest,
    UpdateUserRequest,
    UserEnvelope,
    UsersListResponse,
)
from app.schemas.common import MessageResponse, Pagination
from app.services.auth_service import (
    AuthService,
    AuthServiceError,
    InvalidCredentialsError,
    InvalidRequestError,
    InvalidTokenError,
    UserExistsError,
    UserInactiveError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_auth_service(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> AuthService:
    """Dependency: AuthService bound to this request's session and the app's token issuer."""
    return AuthService(
        UserRepository(db),
        request.app.state.token_issuer,
        bcrypt_rounds=request.app.state.settings.BCRYPT_ROUNDS,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _http_error(err: AuthServiceError, not_found: str = "User not found") -> HTTPException:
    """Map a service failure to its fixed status code."""
    if isinstance(err, InvalidRequestError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=err.message)
    if isinstance(err, UserNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
    if isinstance(err, UserExistsError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already exists",
        )
    if isinstance(err, InvalidCredentialsError):
        return _unauthorized("Invalid username or password")
    if isinstance(err, UserInactiveError):
        return _unauthorized("User account is inactive")
    if isinstance(err, InvalidTokenError):
        return _unauthorized("Invalid or expired token")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> CurrentUser:
    """Dependency: require a valid Bearer JWT for an existing, active account. Raises 401 otherwise."""
    if credentials is None:
        if not request.headers.get("authorization"):
            raise _unauthorized("Authorization header required")
        raise _unauthorized("Invalid authorization header format")

    try:
        user = service.validate_token(credentials.credentials)
    except InvalidTokenError:
        raise _unauthorized("Invalid or expired token")
    except UserNotFoundError:
        raise _unauthorized("User not found")
    except UserInactiveError:
        raise _unauthorized("User account is inactive")

    current = CurrentUser(id=user.id, username=user.username, role=user.role)
    request.state.current_user = current
    return current


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role admin. Raises 403 for anyone else."""
    match current_user.role:
        case UserRole.ADMIN:
            return current_user
        case UserRole.USER:
            pass
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Admin access required",
    )


@router.post("/login", response_model=LoginEnvelope)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginEnvelope:
    """
    Authenticate with username and password; returns a JWT valid for 24 hours.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        return LoginEnvelope(data=service.login(body))
    except AuthServiceError as e:
        raise _http_error(e) from e


@router.get("/me", response_model=UserEnvelope)
def get_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserEnvelope:
    """Profile of the authenticated user."""
    try:
        return UserEnvelope(data=service.get_user(current_user.id))
    except AuthServiceError as e:
        raise _http_error(e) from e


@router.patch("/password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Change the authenticated user's password; requires the current password."""
    try:
        service.change_password(current_user.id, body)
    except InvalidCredentialsError as e:
        raise _unauthorized("Current password is incorrect") from e
    except AuthServiceError as e:
        raise _http_error(e) from e
    return MessageResponse(message="Password changed successfully")


@router.post("/users", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(
    body: CreateUserRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserEnvelope:
    """Create a user account (admin only). There is no public registration."""
    try:
        return UserEnvelope(data=service.create_user(body))
    except AuthServiceError as e:
        raise _http_error(e) from e


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    page: int = 1,
    page_size: int = 20,
) -> UsersListResponse:
    """List users newest first (admin only). Out-of-range paging values are clamped."""
    result = service.list_users(page, page_size)
    return UsersListResponse(data=result.items, pagination=Pagination.from_page(result))


@router.get("/users/{user_id}", response_model=UserEnvelope)
def get_user(
    user_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserEnvelope:
    try:
        return UserEnvelope(data=service.get_user(user_id))
    except AuthServiceError as e:
        raise _http_error(e) from e


@router.patch("/users/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: int,
    body: UpdateUserRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserEnvelope:
    """Apply only the provided fields (email, role, is_active)."""
    try:
        return UserEnvelope(data=service.update_user(user_id, body))
    except AuthServiceError as e:
        raise _http_error(e) from e


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> Response:
    """Soft-delete a user (admin only)."""
    try:
        service.delete_user(user_id)
    except AuthServiceError as e:
        raise _http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
