"""Password hashing and JWT creation/verification for authentication."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.models.user import UserRole

if TYPE_CHECKING:
    from app.models.user import User

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Sessions are valid for a fixed window from issuance.
TOKEN_TTL = timedelta(hours=24)

JWT_SECRET_MIN_LEN = 32

# Values shipped in sample env files and docs; never valid as a real secret.
KNOWN_PLACEHOLDER_SECRETS: frozenset[str] = frozenset(
    {
        "your-secret-key-change-in-production",
        "your-jwt-secret-key-change-this",
        "change-me-in-production",
        "changeme",
        "secret",
    }
)

_REQUIRED_CLAIMS = ["exp", "iat", "sub", "user_id", "username", "role"]

# Dummy digests keyed by bcrypt cost, for unknown-username logins.
_dummy_hashes: dict[int, str] = {}


class InsecureSecretError(ValueError):
    """Raised when the configured signing secret is too short or a placeholder."""


def ensure_secure_secret(secret: str) -> str:
    """Return secret unchanged, or raise InsecureSecretError if it must not be used."""
    if not secret or len(secret) < JWT_SECRET_MIN_LEN:
        raise InsecureSecretError(
            f"JWT secret is insecure: must be at least {JWT_SECRET_MIN_LEN} characters"
        )
    if secret.strip().lower() in KNOWN_PLACEHOLDER_SECRETS:
        raise InsecureSecretError("JWT secret is insecure: placeholder values are not allowed")
    return secret


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds or BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Never raises."""
    if not plain_password or not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def dummy_hash(rounds: int | None = None) -> str:
    """Digest of a throwaway password at the given cost; built once per cost."""
    rounds = rounds or BCRYPT_ROUNDS
    digest = _dummy_hashes.get(rounds)
    if digest is None:
        digest = _dummy_hashes.setdefault(rounds, hash_password("not-a-real-password", rounds=rounds))
    return digest


def burn_password_check(plain_password: str, rounds: int | None = None) -> None:
    """Spend one bcrypt verification so unknown usernames cost the same as wrong passwords."""
    verify_password(plain_password or "x", dummy_hash(rounds))


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified access token."""

    user_id: int
    username: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """
    Signs and verifies stateless HS256 access tokens.

    The secret is fixed for the lifetime of the issuer. verify() does not look
    at the account; callers re-fetch it and check is_active.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = TOKEN_TTL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._secret = ensure_secure_secret(secret)
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock or (lambda: datetime.now(UTC))

    def issue(self, user: "User") -> tuple[str, datetime]:
        """Create a signed token for user; returns (token, expires_at)."""
        now = self._clock()
        expires_at = now + self._ttl
        payload: dict[str, Any] = {
            "user_id": user.id,
            "username": user.username,
            "role": UserRole(user.role).value,
            "sub": user.username,
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, expires_at

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate token; return its claims.
        Raises jwt.InvalidTokenError on bad signature, expiry or malformed claims.
        """
        payload = jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            options={"require": _REQUIRED_CLAIMS},
        )
        try:
            return TokenClaims(
                user_id=int(payload["user_id"]),
                username=str(payload["username"]),
                role=UserRole(payload["role"]),
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (TypeError, ValueError) as e:
            raise jwt.InvalidTokenError("Invalid token payload") from e
