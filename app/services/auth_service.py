"""Account service: login, user management, token validation and default-admin bootstrap."""

import logging
import secrets

import jwt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.security import (
    BCRYPT_ROUNDS,
    TokenIssuer,
    burn_password_check,
    dummy_hash,
    hash_password,
    verify_password,
)
from app.models.user import User, UserRole
from app.repositories.user_repository import UserRepository
from app.schemas.auth import (
    ChangePasswordRequest,
    CreateUserRequest,
    LoginRequest,
    LoginResponse,
    UpdateUserRequest,
    UserInfo,
)
from app.schemas.common import Page, clamp_pagination

logger = logging.getLogger(__name__)


class AuthServiceError(Exception):
    """Base for the typed failures of the account service."""

    default_message = "Authentication error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequestError(AuthServiceError):
    default_message = "invalid request"


class InvalidCredentialsError(AuthServiceError):
    """Unknown username and wrong password are deliberately the same error."""

    default_message = "invalid username or password"


class UserNotFoundError(AuthServiceError):
    default_message = "user not found"


class UserExistsError(AuthServiceError):
    default_message = "user already exists"


class UserInactiveError(AuthServiceError):
    default_message = "user account is inactive"


class InvalidTokenError(AuthServiceError):
    default_message = "invalid token"


class AuthService:
    """Orchestrates the credential store, password hasher and token issuer."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenIssuer,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds
        # Unknown-username logins must not pay for building the dummy digest.
        dummy_hash(bcrypt_rounds)

    def login(self, req: LoginRequest | None) -> LoginResponse:
        if req is None:
            raise InvalidRequestError()

        user = self.users.get_by_username(req.username)
        if user is None:
            burn_password_check(req.password, self.bcrypt_rounds)
            logger.info("Login failed: unknown username", extra={"username": req.username})
            raise InvalidCredentialsError()
        if not user.is_active:
            logger.info("Login failed: inactive account", extra={"username": req.username})
            raise UserInactiveError()
        if not verify_password(req.password, user.password_hash):
            logger.info("Login failed: wrong password", extra={"username": req.username})
            raise InvalidCredentialsError()

        try:
            self.users.touch_last_login(user.id)
        except SQLAlchemyError:
            # Login still succeeds; last_login_at is informational only.
            logger.warning("Could not record last login for user_id=%s", user.id, exc_info=True)

        token, expires_at = self.tokens.issue(user)
        logger.info("Login succeeded", extra={"user_id": user.id, "username": user.username})
        return LoginResponse(
            token=token,
            expires_at=expires_at,
            user=UserInfo.model_validate(user),
        )

    def create_user(self, req: CreateUserRequest | None) -> UserInfo:
        if req is None:
            raise InvalidRequestError()

        if self.users.exists_by_username_or_email(req.username, req.email):
            raise UserExistsError()

        user = User(
            username=req.username,
            email=req.email,
            role=req.role,
            is_active=True,
            password_hash=hash_password(req.password, rounds=self.bcrypt_rounds),
        )
        try:
            self.users.create(user)
        except IntegrityError as e:
            # Lost a race, or the name belongs to a soft-deleted account.
            raise UserExistsError() from e
        logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
        return UserInfo.model_validate(user)

    def get_user(self, user_id: int) -> UserInfo:
        return UserInfo.model_validate(self._get(user_id))

    def list_users(self, page: int, page_size: int) -> Page[UserInfo]:
        page, page_size = clamp_pagination(page, page_size)
        users, total = self.users.list_paged((page - 1) * page_size, page_size)
        return Page(
            items=[UserInfo.model_validate(u) for u in users],
            total=total,
            page=page,
            page_size=page_size,
        )

    def update_user(self, user_id: int, req: UpdateUserRequest | None) -> UserInfo:
        if req is None:
            raise InvalidRequestError()

        user = self._get(user_id)
        if req.email is not None:
            user.email = req.email
        if req.role is not None:
            user.role = req.role
        if req.is_active is not None:
            user.is_active = req.is_active

        try:
            self.users.update(user)
        except IntegrityError as e:
            raise UserExistsError("email already in use") from e
        return UserInfo.model_validate(user)

    def change_password(self, user_id: int, req: ChangePasswordRequest | None) -> None:
        if req is None:
            raise InvalidRequestError()

        user = self._get(user_id)
        if not verify_password(req.current_password, user.password_hash):
            raise InvalidCredentialsError("current password is incorrect")

        user.password_hash = hash_password(req.new_password, rounds=self.bcrypt_rounds)
        self.users.update(user)
        logger.info("Password changed", extra={"user_id": user_id})

    def delete_user(self, user_id: int) -> None:
        if not self.users.soft_delete(user_id):
            raise UserNotFoundError()
        logger.info("User deleted", extra={"user_id": user_id})

    def validate_token(self, token: str) -> User:
        """Verify the token, then re-fetch the account and require it to be active."""
        try:
            claims = self.tokens.verify(token)
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError() from e

        user = self.users.get_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundError()
        if not user.is_active:
            raise UserInactiveError()
        return user

    def ensure_default_admin(
        self,
        username: str,
        email: str,
        password: str | None = None,
    ) -> bool:
        """
        Create the bootstrap admin if no live account has this username.

        Returns True when an account was created. Without a configured password a
        one-time password is generated and logged once; rotate it after first login.
        """
        if self.users.get_by_username(username) is not None:
            return False

        generated = password is None
        if generated:
            password = secrets.token_urlsafe(18)

        admin = User(
            username=username,
            email=email,
            role=UserRole.ADMIN,
            is_active=True,
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
        )
        self.users.create(admin)
        if generated:
            logger.warning(
                "Created default admin '%s' with one-time password %s; change it now",
                username,
                password,
            )
        else:
            logger.info("Created default admin '%s' with the configured password", username)
        return True

    def _get(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user
