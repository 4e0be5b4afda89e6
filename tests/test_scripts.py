"""Tests for the CLI helpers in app.scripts."""

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from app.core.security import JWT_SECRET_MIN_LEN, TokenIssuer, verify_password
from app.models import User, UserRole
from app.scripts import create_user, generate_jwt_secret, issue_token
from tests.support import add_user, make_issuer, make_store


class TestGenerateJwtSecret(unittest.TestCase):
    def test_secret_is_accepted_by_issuer(self) -> None:
        secret = generate_jwt_secret.generate_secret()
        self.assertGreaterEqual(len(secret), JWT_SECRET_MIN_LEN)
        TokenIssuer(secret)

    def test_secrets_differ(self) -> None:
        self.assertNotEqual(generate_jwt_secret.generate_secret(), generate_jwt_secret.generate_secret())

    def test_too_few_bytes_is_an_error(self) -> None:
        with patch("sys.argv", ["generate_jwt_secret", "--bytes", "8"]), redirect_stderr(io.StringIO()):
            self.assertEqual(generate_jwt_secret.main(), 1)

    def test_minimum_bytes_is_enough(self) -> None:
        with patch("sys.argv", ["generate_jwt_secret", "--bytes", "24"]), redirect_stdout(io.StringIO()):
            self.assertEqual(generate_jwt_secret.main(), 0)


class ScriptTestCase(unittest.TestCase):
    """Runs a script's main() against an in-memory store."""

    module = None

    def setUp(self) -> None:
        self.store = make_store()
        patcher = patch.object(self.module, "SessionLocal", self.store)
        patcher.start()
        self.addCleanup(patcher.stop)

    def run_main(self, *args: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with patch("sys.argv", [self.module.__name__, *args]), redirect_stdout(out), redirect_stderr(err):
            code = self.module.main()
        return code, out.getvalue(), err.getvalue()


class TestCreateUserScript(ScriptTestCase):
    module = create_user

    def test_creates_admin(self) -> None:
        code, out, _ = self.run_main("alice", "alice@example.com", "alice-password", "admin")
        self.assertEqual(code, 0)
        self.assertIn("Created user 'alice'", out)

        db = self.store()
        try:
            user = db.query(User).filter(User.username == "alice").one()
            self.assertEqual(user.role, UserRole.ADMIN)
            self.assertTrue(verify_password("alice-password", user.password_hash))
        finally:
            db.close()

    def test_duplicate_fails(self) -> None:
        self.assertEqual(self.run_main("alice", "alice@example.com", "alice-password")[0], 0)
        code, _, err = self.run_main("alice", "other@example.com", "alice-password")
        self.assertEqual(code, 1)
        self.assertIn("already exists", err)

    def test_short_password_rejected(self) -> None:
        code, _, err = self.run_main("alice", "alice@example.com", "short")
        self.assertEqual(code, 1)
        self.assertIn("password", err)


class TestIssueTokenScript(ScriptTestCase):
    module = issue_token

    def test_prints_verifiable_token(self) -> None:
        db = self.store()
        try:
            user_id = add_user(db, "bob", role=UserRole.ADMIN).id
        finally:
            db.close()

        code, out, _ = self.run_main("bob")
        self.assertEqual(code, 0)
        token = out.strip().splitlines()[-1].removeprefix("Authorization: Bearer ")
        claims = make_issuer().verify(token)
        self.assertEqual((claims.user_id, claims.role), (user_id, UserRole.ADMIN))

    def test_unknown_user(self) -> None:
        code, out, err = self.run_main("nobody")
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("not found", err)

    def test_inactive_user(self) -> None:
        db = self.store()
        try:
            add_user(db, "sleepy", is_active=False)
        finally:
            db.close()
        code, _, err = self.run_main("sleepy")
        self.assertEqual(code, 1)
        self.assertIn("inactive", err)


if __name__ == "__main__":
    unittest.main()
