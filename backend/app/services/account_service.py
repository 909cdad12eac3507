"""
Account service: authorization rules and validation ordering for account use cases.

Every check short-circuits on the first failure, in this order: actor is
active, subject exists, subject is active (when an admin acts), field formats,
login uniqueness, and finally whether the actor may act on the subject.
"""

import logging
from typing import List
from sqlalchemy.orm import Session

from app.schemas.account import (
    ClaimsData,
    CreatedUser,
    LoginChangeResult,
    RegistrationRequest,
    ShortUser,
    UpdateUserRequest,
    UserWithoutPassword,
)
from app.services.user_store import (
    UserStore,
    gender_is_correct,
    login_is_correct,
    name_is_correct,
    password_is_correct,
)
from app.utils.jwt import create_access_token

logger = logging.getLogger(__name__)

MIN_AGE_FILTER = 0
MAX_AGE_FILTER = 100

LOGIN_FORMAT_ERROR = (
    "Login is not correct! All characters except Latin letters and numbers are prohibited!"
)
PASSWORD_FORMAT_ERROR = (
    "Password is not correct! All characters except Latin letters and numbers are prohibited!"
)
NAME_FORMAT_ERROR = (
    "Name is not correct! All characters except Latin and Russian letters are prohibited!"
)
GENDER_FORMAT_ERROR = "Gender is not correct! 0 - female, 1 - male, 2 - unknown!"
NOT_FOUND_OR_DELETED = "User not found or deleted!"
USER_NOT_FOUND = "User not found!"
USER_NOT_ACTIVE = "User is not active!"
ACTOR_NOT_ACTIVE = "Logged-in user is not active!"
LOGIN_TAKEN = "The user with this login already exists!"


class AccountError(ValueError):
    """A request that cannot be served: bad input, unknown user, conflict."""


class AccountForbiddenError(AccountError):
    """The actor is not allowed to act on the subject."""


class AccountService:
    """Account use cases on behalf of an authenticated actor."""

    def __init__(self, db: Session):
        self.store = UserStore(db)

    # Shared checks

    def _ensure_actor_active(self, actor: ClaimsData) -> None:
        # The token may outlive the row (hard delete, rename by an admin)
        if not self.store.exists_by_login(actor.login) or not self.store.is_active(
            actor.login
        ):
            logger.warning(f"[AUTH] Inactive or unknown actor: {actor.login}")
            raise AccountError(ACTOR_NOT_ACTIVE)

    def _ensure_exists(self, login: str) -> None:
        if not self.store.exists_by_login(login):
            raise AccountError(USER_NOT_FOUND)

    def _ensure_subject_editable(self, actor: ClaimsData, login: str) -> None:
        self._ensure_actor_active(actor)
        self._ensure_exists(login)
        if actor.admin and not self.store.is_active(login):
            raise AccountError(USER_NOT_ACTIVE)

    @staticmethod
    def _ensure_may_act_on(actor: ClaimsData, login: str) -> None:
        if not actor.admin and actor.login != login:
            logger.warning(f"[AUTH] {actor.login} may not modify {login}")
            raise AccountForbiddenError(f"User {actor.login} may not modify {login}")

    # Use cases

    def authenticate(self, login: str, password: str) -> str:
        """Check credentials and return a signed token."""
        if not self.store.exists_by_login(login) or not self.store.is_active(login):
            raise AccountError(NOT_FOUND_OR_DELETED)

        claims = self.store.verify_password(login, password)
        if claims is None:
            logger.info(f"[LOGIN] Wrong password for {login}")
            raise AccountError("Wrong password!")

        logger.info(f"[LOGIN] {login} authenticated")
        return create_access_token(claims.login, claims.admin)

    def register(self, actor: ClaimsData, request: RegistrationRequest) -> CreatedUser:
        self._ensure_actor_active(actor)

        if not login_is_correct(request.login):
            raise AccountError(LOGIN_FORMAT_ERROR)
        if not password_is_correct(request.password):
            raise AccountError(PASSWORD_FORMAT_ERROR)
        if not name_is_correct(request.name):
            raise AccountError(NAME_FORMAT_ERROR)
        if not gender_is_correct(request.gender):
            raise AccountError(GENDER_FORMAT_ERROR)
        if self.store.exists_by_login(request.login):
            logger.warning(f"[REGISTER] Login already taken: {request.login}")
            raise AccountError(LOGIN_TAKEN)

        if not self.store.create(request, actor.login):
            raise AccountError("No correct data!")

        logger.info(f"[REGISTER] {actor.login} created user {request.login}")
        return self.store.get_created(request.login)

    def update_user(
        self, actor: ClaimsData, request: UpdateUserRequest
    ) -> UserWithoutPassword:
        self._ensure_subject_editable(actor, request.login)

        if request.name and not name_is_correct(request.name):
            raise AccountError(NAME_FORMAT_ERROR)
        if request.gender is not None and not gender_is_correct(request.gender):
            raise AccountError(GENDER_FORMAT_ERROR)

        self._ensure_may_act_on(actor, request.login)

        if not self.store.update(request, actor.login):
            raise AccountError("The user could not be updated.")

        logger.info(f"[UPDATE] {actor.login} updated user {request.login}")
        return self.store.get_without_password(request.login)

    def change_login(
        self, actor: ClaimsData, old_login: str, new_login: str
    ) -> LoginChangeResult:
        """
        Rename a user.

        A fresh token is returned only when the actor renamed themself; an
        admin renaming someone else leaves that user to log in again.
        Renaming a login to itself changes nothing and succeeds.
        """
        self._ensure_subject_editable(actor, old_login)

        if old_login == new_login:
            self._ensure_may_act_on(actor, old_login)
            return LoginChangeResult(
                metadata=self.store.get_without_password(old_login), token=None
            )

        if not login_is_correct(new_login):
            raise AccountError(
                "New login is not correct! All characters except Latin letters and numbers are prohibited!"
            )
        if self.store.exists_by_login(new_login):
            raise AccountError(LOGIN_TAKEN)

        self._ensure_may_act_on(actor, old_login)

        if not self.store.change_login(old_login, new_login, actor.login):
            raise AccountError("The user could not be updated.")

        logger.info(f"[UPDATE-LOGIN] {actor.login} renamed {old_login} to {new_login}")
        metadata = self.store.get_without_password(new_login)

        if actor.login != old_login:
            return LoginChangeResult(metadata=metadata, token=None)

        claims = self.store.get_claims_data(new_login)
        return LoginChangeResult(
            metadata=metadata,
            token=create_access_token(claims.login, claims.admin),
        )

    def change_password(
        self, actor: ClaimsData, login: str, password: str, confirm_password: str
    ) -> str:
        self._ensure_subject_editable(actor, login)

        if not password_is_correct(password):
            raise AccountError(PASSWORD_FORMAT_ERROR)
        if not password_is_correct(confirm_password):
            raise AccountError(
                "ConfirmPassword is not correct! All characters except Latin letters and numbers are prohibited!"
            )
        if password != confirm_password:
            raise AccountError("Passwords don't match")

        self._ensure_may_act_on(actor, login)

        if not self.store.change_password(login, password, actor.login):
            raise AccountError("The user password could not be updated.")

        logger.info(f"[UPDATE-PASSWORD] {actor.login} changed password of {login}")
        return "Password update success!"

    def list_active_users(self) -> List[UserWithoutPassword]:
        return self.store.list_active()

    def list_users_over_age(self, age: int) -> List[UserWithoutPassword]:
        if age < MIN_AGE_FILTER or age > MAX_AGE_FILTER:
            raise AccountError("No correct age!")
        return self.store.list_over_age(age)

    def get_short_data(self, login: str) -> ShortUser:
        if not login_is_correct(login):
            raise AccountError(LOGIN_FORMAT_ERROR)
        self._ensure_exists(login)
        return self.store.get_short(login)

    def get_profile(
        self, actor: ClaimsData, login: str, password: str
    ) -> UserWithoutPassword:
        """Own profile, re-checked against the password."""
        if actor.login != login:
            raise AccountError(
                "The login of authorization and the provided login do not match!"
            )
        if not self.store.exists_by_login(login) or not self.store.is_active(login):
            raise AccountError(NOT_FOUND_OR_DELETED)
        if self.store.verify_password(login, password) is None:
            raise AccountError("Invalid password!")
        return self.store.get_without_password(login)

    def delete_user(self, actor: ClaimsData, login: str, soft_delete: bool = True) -> str:
        self._ensure_actor_active(actor)
        self._ensure_exists(login)

        if soft_delete:
            if not self.store.is_active(login):
                return "Deleting user is not active!"
            deleted = self.store.soft_delete(login, actor.login)
            variant = "soft"
        else:
            deleted = self.store.hard_delete(login)
            variant = "hard"

        if not deleted:
            raise AccountError("The user has not been deleted.")

        logger.info(f"[DELETE] {actor.login} removed {login} ({variant})")
        return f'The {variant} removal user "{login}" was successful!'

    def recover_user(self, actor: ClaimsData, login: str) -> str:
        if not login_is_correct(login):
            raise AccountError(LOGIN_FORMAT_ERROR)

        self._ensure_actor_active(actor)
        self._ensure_exists(login)

        if self.store.is_active(login):
            return "User doesn't soft deleted."

        if not self.store.recover(login, actor.login):
            raise AccountError("The user has not been recovered.")

        logger.info(f"[RECOVERY] {actor.login} recovered {login}")
        return "The user's recovery was successful!"
