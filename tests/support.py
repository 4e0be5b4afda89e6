"""Builders shared by the test modules."""

from sqlalchemy.orm import Session, sessionmaker

from app.core.database import build_engine, make_session_factory
from app.core.security import TokenIssuer, hash_password
from app.models import Base, User, UserRole
from app.repositories.user_repository import UserRepository
from app.services.auth_service import AuthService

TEST_SECRET = "unit-test-signing-secret-0123456789abcdef"
TEST_ROUNDS = 4


def make_store() -> sessionmaker[Session]:
    """Session factory over a fresh in-memory database with all tables."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    return make_session_factory(engine)


def make_session() -> Session:
    return make_store()()


def make_issuer(**kwargs: object) -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, **kwargs)


def make_auth_service(session: Session, issuer: TokenIssuer | None = None) -> AuthService:
    return AuthService(UserRepository(session), issuer or make_issuer(), bcrypt_rounds=TEST_ROUNDS)


def add_user(
    session: Session,
    username: str = "alice",
    email: str | None = None,
    password: str = "alice-password",
    role: UserRole = UserRole.USER,
    is_active: bool = True,
) -> User:
    """Insert a user directly, bypassing the service."""
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        password_hash=hash_password(password, rounds=TEST_ROUNDS),
        role=role,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user
