"""
Issue a bearer token for an existing active account, for testing admin endpoints:
  python -m app.scripts.issue_token admin
"""
import argparse
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.security import TokenIssuer
from app.repositories.user_repository import UserRepository


def main() -> int:
    parser = argparse.ArgumentParser(description="Issue a JWT for an existing user.")
    parser.add_argument("username", help="Username of an active account")
    args = parser.parse_args()

    settings = get_settings()
    issuer = TokenIssuer(settings.JWT_SECRET.get_secret_value(), algorithm=settings.JWT_ALGORITHM)
    db = SessionLocal()
    try:
        user = UserRepository(db).get_by_username(args.username)
        if user is None:
            print(f"User '{args.username}' not found.", file=sys.stderr)
            return 1
        if not user.is_active:
            print(f"User '{args.username}' is inactive.", file=sys.stderr)
            return 1
        token, expires_at = issuer.issue(user)
    finally:
        db.close()

    print(f"JWT for '{user.username}' (role {user.role.value}), expires {expires_at.isoformat()}:")
    print(token)
    print()
    print(f"Authorization: Bearer {token}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
