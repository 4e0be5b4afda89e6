"""
Create a user (e.g. an extra admin). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user alice alice@example.com your-secure-password admin
"""
import argparse
import sys

from pydantic import ValidationError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.log import configure_logging
from app.core.security import TokenIssuer
from app.models.user import UserRole
from app.repositories.user_repository import UserRepository
from app.schemas.auth import CreateUserRequest
from app.services.auth_service import AuthService, UserExistsError


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a support app user (no public registration).")
    parser.add_argument("username", help="Username (3-50 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.USER.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args()
    configure_logging()

    try:
        req = CreateUserRequest(
            username=args.username.strip(),
            email=args.email.strip(),
            password=args.password,
            role=UserRole(args.role),
        )
    except ValidationError as e:
        for err in e.errors():
            print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    settings = get_settings()
    db = SessionLocal()
    try:
        service = AuthService(
            UserRepository(db),
            TokenIssuer(settings.JWT_SECRET.get_secret_value(), algorithm=settings.JWT_ALGORITHM),
            bcrypt_rounds=settings.BCRYPT_ROUNDS,
        )
        try:
            user = service.create_user(req)
        except UserExistsError:
            print(f"User '{req.username}' or email '{req.email}' already exists.", file=sys.stderr)
            return 1
        print(f"Created user '{user.username}' (id={user.id}) with role '{user.role.value}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
