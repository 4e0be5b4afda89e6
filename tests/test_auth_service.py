"""Unit tests for app.services.auth_service against an in-memory SQLite store."""

import unittest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.core.security import verify_password
from app.models import User, UserRole
from app.schemas.auth import (
    ChangePasswordRequest,
    CreateUserRequest,
    LoginRequest,
    UpdateUserRequest,
)
from app.services.auth_service import (
    InvalidCredentialsError,
    InvalidRequestError,
    InvalidTokenError,
    UserExistsError,
    UserInactiveError,
    UserNotFoundError,
)
from tests.support import TEST_ROUNDS, add_user, make_auth_service, make_session


class AuthServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session()
        self.service = make_auth_service(self.session)

    def tearDown(self) -> None:
        self.session.close()


class TestLogin(AuthServiceTestCase):
    def test_success_returns_token_and_profile(self) -> None:
        user = add_user(self.session, "alice", password="alice-password", role=UserRole.ADMIN)
        resp = self.service.login(LoginRequest(username="alice", password="alice-password"))
        self.assertEqual(resp.user.id, user.id)
        self.assertEqual(resp.user.role, UserRole.ADMIN)
        self.assertTrue(resp.user.is_active)
        claims = self.service.tokens.verify(resp.token)
        self.assertEqual((claims.user_id, claims.username, claims.role), (user.id, "alice", UserRole.ADMIN))

    def test_success_records_last_login(self) -> None:
        user = add_user(self.session, "alice", password="alice-password")
        self.assertIsNone(user.last_login_at)
        self.service.login(LoginRequest(username="alice", password="alice-password"))
        self.session.expire_all()
        self.assertIsNotNone(self.session.get(User, user.id).last_login_at)

    def test_unknown_user_and_wrong_password_are_indistinguishable(self) -> None:
        add_user(self.session, "realuser", password="right-password")
        with self.assertRaises(InvalidCredentialsError) as unknown:
            self.service.login(LoginRequest(username="nouser", password="x"))
        with self.assertRaises(InvalidCredentialsError) as wrong:
            self.service.login(LoginRequest(username="realuser", password="wrongpass"))
        self.assertEqual(type(unknown.exception), type(wrong.exception))
        self.assertEqual(unknown.exception.message, wrong.exception.message)

    def test_missing_request(self) -> None:
        with self.assertRaises(InvalidRequestError):
            self.service.login(None)

    def test_inactive_user_rejected(self) -> None:
        add_user(self.session, "sleepy", password="sleepy-password", is_active=False)
        with self.assertRaises(UserInactiveError):
            self.service.login(LoginRequest(username="sleepy", password="sleepy-password"))

    def test_inactive_user_with_wrong_password_is_reported_inactive(self) -> None:
        add_user(self.session, "sleepy", password="sleepy-password", is_active=False)
        with self.assertRaises(UserInactiveError):
            self.service.login(LoginRequest(username="sleepy", password="guess"))

    def test_soft_deleted_user_cannot_login(self) -> None:
        user = add_user(self.session, "gone", password="gone-password")
        self.service.delete_user(user.id)
        with self.assertRaises(InvalidCredentialsError):
            self.service.login(LoginRequest(username="gone", password="gone-password"))

    def test_unknown_user_burns_check_at_configured_cost(self) -> None:
        with patch("app.services.auth_service.burn_password_check") as burn:
            with self.assertRaises(InvalidCredentialsError):
                self.service.login(LoginRequest(username="nouser", password="x"))
        burn.assert_called_once_with("x", TEST_ROUNDS)

    def test_last_login_failure_does_not_block_login(self) -> None:
        add_user(self.session, "alice", password="alice-password")
        with patch.object(
            self.service.users,
            "touch_last_login",
            side_effect=OperationalError("UPDATE users", {}, Exception("db down")),
        ):
            resp = self.service.login(LoginRequest(username="alice", password="alice-password"))
        self.assertTrue(resp.token)


class TestCreateUser(AuthServiceTestCase):
    def _req(self, username: str = "newuser", email: str = "new@example.com", role: UserRole = UserRole.USER):
        return CreateUserRequest(username=username, email=email, password="new-password", role=role)

    def test_creates_active_user_with_hashed_password(self) -> None:
        info = self.service.create_user(self._req())
        self.assertTrue(info.is_active)
        self.assertEqual(info.username, "newuser")
        stored = self.session.get(User, info.id)
        self.assertNotEqual(stored.password_hash, "new-password")
        self.assertTrue(verify_password("new-password", stored.password_hash))

    def test_duplicate_username_rejected(self) -> None:
        self.service.create_user(self._req("dup", "one@example.com"))
        with self.assertRaises(UserExistsError):
            self.service.create_user(self._req("dup", "two@example.com"))

    def test_duplicate_email_rejected(self) -> None:
        self.service.create_user(self._req("first", "same@example.com"))
        with self.assertRaises(UserExistsError):
            self.service.create_user(self._req("second", "same@example.com"))

    def test_username_of_deleted_account_still_taken(self) -> None:
        info = self.service.create_user(self._req("recycled", "old@example.com"))
        self.service.delete_user(info.id)
        with self.assertRaises(UserExistsError):
            self.service.create_user(self._req("recycled", "fresh@example.com"))

    def test_missing_request(self) -> None:
        with self.assertRaises(InvalidRequestError):
            self.service.create_user(None)


class TestListUsers(AuthServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        for i in range(25):
            add_user(self.session, f"user{i:02d}")

    def test_negative_page_behaves_as_first_page(self) -> None:
        clamped = self.service.list_users(-1, 20)
        first = self.service.list_users(1, 20)
        self.assertEqual(clamped.page, 1)
        self.assertEqual([u.id for u in clamped.items], [u.id for u in first.items])

    def test_out_of_range_page_size_behaves_as_20(self) -> None:
        for size in (0, 1000):
            result = self.service.list_users(1, size)
            self.assertEqual(result.page_size, 20)
            self.assertEqual(len(result.items), 20)

    def test_total_and_second_page(self) -> None:
        result = self.service.list_users(2, 20)
        self.assertEqual(result.total, 25)
        self.assertEqual(len(result.items), 5)
        self.assertEqual(result.total_pages, 2)

    def test_deleted_users_not_counted(self) -> None:
        victim = self.service.list_users(1, 1).items[0]
        self.service.delete_user(victim.id)
        self.assertEqual(self.service.list_users(1, 100).total, 24)


class TestUpdateUser(AuthServiceTestCase):
    def test_only_provided_fields_change(self) -> None:
        user = add_user(self.session, "alice", email="alice@example.com")
        info = self.service.update_user(user.id, UpdateUserRequest(is_active=False))
        self.assertFalse(info.is_active)
        self.assertEqual(info.email, "alice@example.com")
        self.assertEqual(info.role, UserRole.USER)

    def test_role_and_email_update(self) -> None:
        user = add_user(self.session, "alice")
        info = self.service.update_user(
            user.id, UpdateUserRequest(email="boss@example.com", role=UserRole.ADMIN)
        )
        self.assertEqual(info.email, "boss@example.com")
        self.assertEqual(info.role, UserRole.ADMIN)

    def test_unknown_id(self) -> None:
        with self.assertRaises(UserNotFoundError):
            self.service.update_user(999, UpdateUserRequest(is_active=True))

    def test_email_collision(self) -> None:
        add_user(self.session, "alice", email="alice@example.com")
        bob = add_user(self.session, "bob", email="bob@example.com")
        with self.assertRaises(UserExistsError):
            self.service.update_user(bob.id, UpdateUserRequest(email="alice@example.com"))


class TestChangePassword(AuthServiceTestCase):
    def test_wrong_current_password_leaves_hash_unchanged(self) -> None:
        user = add_user(self.session, "alice", password="old-password")
        before = user.password_hash
        with self.assertRaises(InvalidCredentialsError):
            self.service.change_password(
                user.id,
                ChangePasswordRequest(current_password="not-it", new_password="new-password"),
            )
        self.session.expire_all()
        self.assertEqual(self.session.get(User, user.id).password_hash, before)

    def test_correct_current_password_rehashes(self) -> None:
        user = add_user(self.session, "alice", password="old-password")
        self.service.change_password(
            user.id,
            ChangePasswordRequest(current_password="old-password", new_password="new-password"),
        )
        self.service.login(LoginRequest(username="alice", password="new-password"))
        with self.assertRaises(InvalidCredentialsError):
            self.service.login(LoginRequest(username="alice", password="old-password"))

    def test_unknown_user(self) -> None:
        with self.assertRaises(UserNotFoundError):
            self.service.change_password(
                404, ChangePasswordRequest(current_password="a", new_password="new-password")
            )


class TestDeleteUser(AuthServiceTestCase):
    def test_deleted_user_not_found_afterwards(self) -> None:
        user = add_user(self.session, "alice")
        self.service.delete_user(user.id)
        with self.assertRaises(UserNotFoundError):
            self.service.get_user(user.id)
        with self.assertRaises(UserNotFoundError):
            self.service.delete_user(user.id)

    def test_unknown_id(self) -> None:
        with self.assertRaises(UserNotFoundError):
            self.service.delete_user(12345)


class TestValidateToken(AuthServiceTestCase):
    def _token_for(self, user: User) -> str:
        token, _ = self.service.tokens.issue(user)
        return token

    def test_active_user(self) -> None:
        user = add_user(self.session, "alice")
        self.assertEqual(self.service.validate_token(self._token_for(user)).id, user.id)

    def test_deactivated_user_rejected_although_token_still_verifies(self) -> None:
        user = add_user(self.session, "alice")
        token = self._token_for(user)
        self.service.update_user(user.id, UpdateUserRequest(is_active=False))
        self.service.tokens.verify(token)
        with self.assertRaises(UserInactiveError):
            self.service.validate_token(token)

    def test_deleted_user_rejected(self) -> None:
        user = add_user(self.session, "alice")
        token = self._token_for(user)
        self.service.delete_user(user.id)
        with self.assertRaises(UserNotFoundError):
            self.service.validate_token(token)

    def test_garbage_token(self) -> None:
        with self.assertRaises(InvalidTokenError):
            self.service.validate_token("garbage")


class TestEnsureDefaultAdmin(AuthServiceTestCase):
    def test_idempotent(self) -> None:
        self.assertTrue(self.service.ensure_default_admin("admin", "admin@supportapp.local", "initial-pass"))
        self.assertFalse(self.service.ensure_default_admin("admin", "admin@supportapp.local", "initial-pass"))
        admins = self.session.query(User).filter(User.username == "admin").all()
        self.assertEqual(len(admins), 1)
        self.assertEqual(admins[0].role, UserRole.ADMIN)

    def test_configured_password_logs_in(self) -> None:
        self.service.ensure_default_admin("admin", "admin@supportapp.local", "initial-pass")
        resp = self.service.login(LoginRequest(username="admin", password="initial-pass"))
        self.assertEqual(resp.user.role, UserRole.ADMIN)

    def test_generated_password_is_logged_once(self) -> None:
        with self.assertLogs("app.services.auth_service", level="WARNING") as logs:
            self.assertTrue(self.service.ensure_default_admin("admin", "admin@supportapp.local"))
        self.assertEqual(len(logs.records), 1)
        self.assertIn("one-time password", logs.output[0])

    def test_existing_account_left_untouched(self) -> None:
        existing = add_user(self.session, "admin", password="kept-password", role=UserRole.USER)
        self.assertFalse(self.service.ensure_default_admin("admin", "other@example.com", "ignored-pass"))
        self.session.expire_all()
        self.assertTrue(verify_password("kept-password", self.session.get(User, existing.id).password_hash))


if __name__ == "__main__":
    unittest.main()
