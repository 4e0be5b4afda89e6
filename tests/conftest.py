"""Test environment: must run before any app module reads settings."""

import os

# Always an in-memory database; tests create and drop tables freely.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "unit-test-signing-secret-0123456789abcdef")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DEFAULT_ADMIN_PASSWORD", "admin-password-123")
os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("LOG_LEVEL", "WARNING")
