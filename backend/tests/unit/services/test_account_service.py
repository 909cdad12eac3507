"""
Unit tests for AccountService.

Tests the authorization matrix and the order in which checks fail.
"""

from datetime import date
from unittest import mock
import pytest

from app.schemas.account import ClaimsData, RegistrationRequest, UpdateUserRequest
from app.services.account_service import (
    AccountError,
    AccountForbiddenError,
    AccountService,
)
from app.utils.jwt import decode_access_token

ADMIN = ClaimsData(login="admin", admin=True)


def registration(**overrides):
    data = {
        "login": "bob1",
        "password": "Secret1",
        "name": "Bob",
        "gender": 1,
        "admin": False,
    }
    data.update(overrides)
    return RegistrationRequest(**data)


class TestAuthenticate:
    """Tests for authenticate."""

    def test_returns_token_with_claims(self, test_db, make_user):
        make_user("bob1", password="Secret1")

        token = AccountService(test_db).authenticate("bob1", "Secret1")

        assert decode_access_token(token) == ClaimsData(login="bob1", admin=False)

    def test_unknown_user(self, test_db):
        with pytest.raises(AccountError, match="not found or deleted"):
            AccountService(test_db).authenticate("nobody", "Secret1")

    def test_revoked_user(self, test_db, make_user):
        make_user("bob1", revoked=True)

        with pytest.raises(AccountError, match="not found or deleted"):
            AccountService(test_db).authenticate("bob1", "Secret1")

    def test_wrong_password(self, test_db, make_user):
        make_user("bob1", password="Secret1")

        with pytest.raises(AccountError, match="Wrong password"):
            AccountService(test_db).authenticate("bob1", "Secret2")


class TestRegister:
    """Tests for register."""

    def test_creates_user_stamped_with_admin(self, test_db, admin_user):
        created = AccountService(test_db).register(ADMIN, registration())

        assert created.login == "bob1"
        assert created.created_by == "admin"
        assert created.admin is False
        assert created.guid is not None

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"login": "bob 1"}, "Login is not correct"),
            ({"password": "Secret!"}, "Password is not correct"),
            ({"name": "Bob1"}, "Name is not correct"),
            ({"gender": 5}, "Gender is not correct"),
        ],
    )
    def test_rejects_bad_fields(self, test_db, admin_user, overrides, message):
        with pytest.raises(AccountError, match=message):
            AccountService(test_db).register(ADMIN, registration(**overrides))

    def test_rejects_duplicate_login(self, test_db, admin_user, make_user):
        make_user("bob1", revoked=True)

        with pytest.raises(AccountError, match="already exists"):
            AccountService(test_db).register(ADMIN, registration())

    def test_inactive_admin_cannot_register(self, test_db, make_user):
        make_user("admin", admin=True, revoked=True)

        with pytest.raises(AccountError, match="Logged-in user is not active"):
            AccountService(test_db).register(ADMIN, registration())

    def test_persistence_failure(self, test_db, admin_user):
        service = AccountService(test_db)

        with mock.patch.object(service.store, "create", return_value=False):
            with pytest.raises(AccountError, match="No correct data"):
                service.register(ADMIN, registration())


class TestUpdateUser:
    """Tests for update_user."""

    def test_self_update(self, test_db, make_user):
        make_user("bob1", name="Bob")
        actor = ClaimsData(login="bob1", admin=False)

        updated = AccountService(test_db).update_user(
            actor, UpdateUserRequest(login="bob1", name="Robert", birthday=date(1990, 1, 1))
        )

        assert updated.name == "Robert"
        assert updated.birthday == date(1990, 1, 1)
        assert updated.modified_by == "bob1"

    def test_other_user_forbidden(self, test_db, make_user):
        make_user("bob1")
        make_user("alice")
        actor = ClaimsData(login="bob1", admin=False)

        with pytest.raises(AccountForbiddenError):
            AccountService(test_db).update_user(
                actor, UpdateUserRequest(login="alice", name="Alice")
            )

    def test_admin_cannot_update_revoked_user(self, test_db, admin_user, make_user):
        make_user("bob1", revoked=True)

        with pytest.raises(AccountError, match="User is not active"):
            AccountService(test_db).update_user(
                ADMIN, UpdateUserRequest(login="bob1", name="Robert")
            )

    def test_inactive_actor_checked_first(self, test_db, make_user):
        make_user("bob1", revoked=True)
        actor = ClaimsData(login="bob1", admin=False)

        with pytest.raises(AccountError, match="Logged-in user is not active"):
            AccountService(test_db).update_user(
                actor, UpdateUserRequest(login="nobody", name="Bad1")
            )

    def test_missing_subject_before_format_errors(self, test_db, admin_user):
        with pytest.raises(AccountError, match="User not found"):
            AccountService(test_db).update_user(
                ADMIN, UpdateUserRequest(login="nobody", name="Bad1")
            )

    def test_format_errors_before_authorization(self, test_db, make_user):
        make_user("bob1")
        make_user("alice")
        actor = ClaimsData(login="bob1", admin=False)

        with pytest.raises(AccountError, match="Gender is not correct") as excinfo:
            AccountService(test_db).update_user(
                actor, UpdateUserRequest(login="alice", gender=7)
            )
        assert not isinstance(excinfo.value, AccountForbiddenError)


class TestChangeLogin:
    """Tests for change_login."""

    def test_self_rename_returns_new_token(self, test_db, make_user):
        make_user("bob1")
        actor = ClaimsData(login="bob1", admin=False)

        result = AccountService(test_db).change_login(actor, "bob1", "bob2")

        assert result.metadata.login == "bob2"
        assert result.metadata.modified_by == "bob2"
        assert decode_access_token(result.token) == ClaimsData(login="bob2", admin=False)

    def test_admin_rename_returns_no_token(self, test_db, admin_user, make_user):
        make_user("bob1")

        result = AccountService(test_db).change_login(ADMIN, "bob1", "bob2")

        assert result.metadata.login == "bob2"
        assert result.metadata.modified_by == "admin"
        assert result.token is None

    def test_admin_self_rename_keeps_admin_role(self, test_db, admin_user):
        result = AccountService(test_db).change_login(ADMIN, "admin", "boss")

        assert decode_access_token(result.token) == ClaimsData(login="boss", admin=True)

    def test_same_login_is_noop(self, test_db, make_user):
        make_user("bob1")
        actor = ClaimsData(login="bob1", admin=False)

        result = AccountService(test_db).change_login(actor, "bob1", "bob1")

        assert result.metadata.login == "bob1"
        assert result.metadata.modified_on is None
        assert result.token is None

    def test_taken_login(self, test_db, admin_user, make_user):
        make_user("bob1")
        make_user("bob2")

        with pytest.raises(AccountError, match="already exists"):
            AccountService(test_db).change_login(ADMIN, "bob1", "bob2")

    def test_bad_new_login(self, test_db, admin_user, make_user):
        make_user("bob1")

        with pytest.raises(AccountError, match="New login is not correct"):
            AccountService(test_db).change_login(ADMIN, "bob1", "bob 2")

    def test_other_user_forbidden(self, test_db, make_user):
        make_user("bob1")
        make_user("alice")
        actor = ClaimsData(login="bob1", admin=False)

        with pytest.raises(AccountForbiddenError):
            AccountService(test_db).change_login(actor, "alice", "alice2")

    def test_admin_cannot_rename_revoked_user(self, test_db, admin_user, make_user):
        make_user("bob1", revoked=True)

        with pytest.raises(AccountError, match="User is not active"):
            AccountService(test_db).change_login(ADMIN, "bob1", "bob2")

        assert AccountService(test_db).store.exists_by_login("bob2") is False


class TestChangePassword:
    """Tests for change_password."""

    def test_self_change(self, test_db, make_user):
        make_user("bob1", password="Old1")
        actor = ClaimsData(login="bob1", admin=False)
        service = AccountService(test_db)

        assert service.change_password(actor, "bob1", "New1", "New1") == "Password update success!"
        assert service.authenticate("bob1", "New1")

    def test_mismatch(self, test_db, make_user):
        make_user("bob1")
        actor = ClaimsData(login="bob1", admin=False)

        with pytest.raises(AccountError, match="don't match"):
            AccountService(test_db).change_password(actor, "bob1", "New1", "New2")

    def test_bad_confirmation_format(self, test_db, make_user):
        make_user("bob1")
        actor = ClaimsData(login="bob1", admin=False)

        with pytest.raises(AccountError, match="ConfirmPassword is not correct"):
            AccountService(test_db).change_password(actor, "bob1", "New1", "New 1")

    def test_other_user_forbidden(self, test_db, make_user):
        make_user("bob1")
        make_user("alice")
        actor = ClaimsData(login="bob1", admin=False)

        with pytest.raises(AccountForbiddenError):
            AccountService(test_db).change_password(actor, "alice", "New1", "New1")

    def test_admin_cannot_change_password_of_revoked_user(
        self, test_db, admin_user, make_user
    ):
        make_user("bob1", password="Old1", revoked=True)

        with pytest.raises(AccountError, match="User is not active"):
            AccountService(test_db).change_password(ADMIN, "bob1", "New1", "New1")

        assert AccountService(test_db).store.verify_password("bob1", "Old1") is not None


class TestQueries:
    """Tests for listings, short data and profile."""

    @pytest.mark.parametrize("age", [-1, 101, 150])
    def test_age_out_of_range(self, test_db, age):
        with pytest.raises(AccountError, match="No correct age"):
            AccountService(test_db).list_users_over_age(age)

    @pytest.mark.parametrize("age", [0, 100])
    def test_age_bounds_accepted(self, test_db, age):
        assert AccountService(test_db).list_users_over_age(age) == []

    def test_short_data_unknown_user(self, test_db):
        with pytest.raises(AccountError, match="User not found"):
            AccountService(test_db).get_short_data("nobody")

    def test_short_data_bad_login(self, test_db):
        with pytest.raises(AccountError, match="Login is not correct"):
            AccountService(test_db).get_short_data("no body")

    def test_profile(self, test_db, make_user):
        make_user("bob1", password="Secret1")
        actor = ClaimsData(login="bob1", admin=False)

        profile = AccountService(test_db).get_profile(actor, "bob1", "Secret1")

        assert profile.login == "bob1"
        assert profile.admin is False
        assert profile.revoked_on is None

    def test_profile_of_someone_else(self, test_db, make_user):
        make_user("bob1")

        with pytest.raises(AccountError, match="do not match"):
            AccountService(test_db).get_profile(ADMIN, "bob1", "Secret1")

    def test_profile_wrong_password(self, test_db, make_user):
        make_user("bob1", password="Secret1")
        actor = ClaimsData(login="bob1", admin=False)

        with pytest.raises(AccountError, match="Invalid password"):
            AccountService(test_db).get_profile(actor, "bob1", "Secret2")


class TestDeleteAndRecover:
    """Tests for delete_user and recover_user."""

    def test_soft_delete(self, test_db, admin_user, make_user):
        make_user("bob1")
        service = AccountService(test_db)

        message = service.delete_user(ADMIN, "bob1")

        assert message == 'The soft removal user "bob1" was successful!'
        assert service.store.is_active("bob1") is False

    def test_soft_delete_of_revoked_user_is_reported(self, test_db, admin_user, make_user):
        make_user("bob1", revoked=True)

        assert AccountService(test_db).delete_user(ADMIN, "bob1") == "Deleting user is not active!"

    def test_hard_delete(self, test_db, admin_user, make_user):
        make_user("bob1")
        service = AccountService(test_db)

        message = service.delete_user(ADMIN, "bob1", soft_delete=False)

        assert message == 'The hard removal user "bob1" was successful!'
        assert service.store.exists_by_login("bob1") is False

    def test_delete_unknown_user(self, test_db, admin_user):
        with pytest.raises(AccountError, match="User not found"):
            AccountService(test_db).delete_user(ADMIN, "nobody")

    def test_recover(self, test_db, admin_user, make_user):
        make_user("bob1", revoked=True)
        service = AccountService(test_db)

        assert service.recover_user(ADMIN, "bob1") == "The user's recovery was successful!"
        assert service.store.is_active("bob1") is True

    def test_recover_active_user(self, test_db, admin_user, make_user):
        make_user("bob1")

        assert AccountService(test_db).recover_user(ADMIN, "bob1") == "User doesn't soft deleted."
