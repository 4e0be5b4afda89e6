"""
Print a random secret suitable for JWT_SECRET:
  python -m app.scripts.generate_jwt_secret [--bytes 48]
"""
import argparse
import secrets
import sys

from app.core.security import JWT_SECRET_MIN_LEN, ensure_secure_secret


def generate_secret(num_bytes: int = 48) -> str:
    return ensure_secure_secret(secrets.token_urlsafe(num_bytes))


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a JWT signing secret.")
    parser.add_argument(
        "--bytes",
        type=int,
        default=48,
        help="Random bytes before base64 encoding (min 24)",
    )
    args = parser.parse_args()
    if args.bytes < 24:
        print(
            f"--bytes must be at least 24 to produce a {JWT_SECRET_MIN_LEN}+ character secret.",
            file=sys.stderr,
        )
        return 1
    print(generate_secret(args.bytes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
