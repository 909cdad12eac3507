"""
User store: persistence operations and field validators for the user table.

Every single-row accessor expects the caller to have checked that the login
exists; a missing login raises UserNotFoundError.
"""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import extract, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.account import (
    ClaimsData,
    CreatedUser,
    RegistrationRequest,
    ShortUser,
    UpdateUserRequest,
    UserWithoutPassword,
)
from app.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)

_LOGIN_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
_PASSWORD_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
_NAME_PATTERN = re.compile(r"^[a-zA-Zа-яА-Я]+$")
_GENDERS = (0, 1, 2)  # female, male, unknown


def login_is_correct(login: str) -> bool:
    return bool(login) and _LOGIN_PATTERN.fullmatch(login) is not None


def password_is_correct(password: str) -> bool:
    return bool(password) and _PASSWORD_PATTERN.fullmatch(password) is not None


def name_is_correct(name: str) -> bool:
    """Single-token names of Latin or Cyrillic letters."""
    return bool(name) and _NAME_PATTERN.fullmatch(name) is not None


def gender_is_correct(gender) -> bool:
    return isinstance(gender, int) and not isinstance(gender, bool) and gender in _GENDERS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserNotFoundError(LookupError):
    """Raised when a single-row accessor is called for an unknown login."""

    def __init__(self, login: str):
        super().__init__(f"User {login!r} not found")
        self.login = login


class UserStore:
    """Data access for the user table."""

    def __init__(self, db: Session):
        self.db = db

    def _get(self, login: str) -> User:
        user = self.db.query(User).filter(User.login == login).first()
        if user is None:
            raise UserNotFoundError(login)
        return user

    def _commit(self, action: str, login: str) -> bool:
        try:
            self.db.commit()
            return True
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"[STORE] Failed to {action} user {login}")
            return False

    # Queries

    def exists_by_login(self, login: str) -> bool:
        return (
            self.db.query(User.guid).filter(User.login == login).first() is not None
        )

    def is_active(self, login: str) -> bool:
        return self._get(login).is_active

    def count_admins(self) -> int:
        return self.db.query(func.count(User.guid)).filter(User.admin.is_(True)).scalar()

    def verify_password(self, login: str, password: str) -> Optional[ClaimsData]:
        """Return claims data when the password matches, None otherwise."""
        user = self._get(login)
        if not verify_password(password, user.password):
            return None
        return ClaimsData(login=user.login, admin=user.admin)

    def get_by_login(self, login: str) -> User:
        return self._get(login)

    def get_without_password(self, login: str) -> UserWithoutPassword:
        return UserWithoutPassword.model_validate(self._get(login))

    def get_created(self, login: str) -> CreatedUser:
        return CreatedUser.model_validate(self._get(login))

    def get_short(self, login: str) -> ShortUser:
        user = self._get(login)
        return ShortUser(
            name=user.name,
            gender=user.gender,
            birthday=user.birthday,
            active_status=user.is_active,
        )

    def get_claims_data(self, login: str) -> ClaimsData:
        user = self._get(login)
        return ClaimsData(login=user.login, admin=user.admin)

    def list_active(self) -> List[UserWithoutPassword]:
        users = (
            self.db.query(User)
            .filter(User.revoked_on.is_(None))
            .order_by(User.created_on.asc())
            .all()
        )
        return [UserWithoutPassword.model_validate(user) for user in users]

    def list_over_age(self, threshold_years: int) -> List[UserWithoutPassword]:
        """
        Users whose age, counted in calendar years only, exceeds the threshold.

        Age is current year minus birth year; day and month are ignored.
        Users without a birthday never match.
        """
        max_birth_year = _utcnow().year - threshold_years
        users = (
            self.db.query(User)
            .filter(User.birthday.isnot(None))
            .filter(extract("year", User.birthday) < max_birth_year)
            .order_by(User.birthday.asc())
            .all()
        )
        return [UserWithoutPassword.model_validate(user) for user in users]

    # Mutations

    def create(self, registration: RegistrationRequest, created_by: str) -> bool:
        user = User(
            login=registration.login,
            password=hash_password(registration.password),
            name=registration.name,
            gender=registration.gender,
            birthday=registration.birthday,
            admin=registration.admin,
            created_on=_utcnow(),
            created_by=created_by,
        )
        self.db.add(user)
        return self._commit("create", registration.login)

    def update(self, fields: UpdateUserRequest, acting_login: str) -> bool:
        """Apply the supplied fields; stamp modification only on real change."""
        user = self._get(fields.login)
        changed = False

        if fields.name and fields.name != user.name:
            user.name = fields.name
            changed = True
        if fields.gender is not None and fields.gender != user.gender:
            user.gender = fields.gender
            changed = True
        if fields.birthday is not None and fields.birthday != user.birthday:
            user.birthday = fields.birthday
            changed = True

        if changed:
            user.modified_on = _utcnow()
            user.modified_by = acting_login

        return self._commit("update", fields.login)

    def change_login(self, old_login: str, new_login: str, acting_login: str) -> bool:
        user = self._get(old_login)
        user.login = new_login
        # A self-rename is attributed to the new login
        user.modified_by = new_login if acting_login == old_login else acting_login
        user.modified_on = _utcnow()
        return self._commit("rename", old_login)

    def change_password(self, login: str, password: str, acting_login: str) -> bool:
        user = self._get(login)
        user.password = hash_password(password)
        user.modified_by = acting_login
        user.modified_on = _utcnow()
        return self._commit("change password of", login)

    def soft_delete(self, login: str, acting_login: str) -> bool:
        user = self._get(login)
        user.revoked_by = acting_login
        user.revoked_on = _utcnow()
        return self._commit("soft delete", login)

    def hard_delete(self, login: str) -> bool:
        user = self._get(login)
        self.db.delete(user)
        return self._commit("hard delete", login)

    def recover(self, login: str, acting_login: str) -> bool:
        user = self._get(login)
        user.revoked_on = None
        user.revoked_by = None
        user.modified_by = acting_login
        user.modified_on = _utcnow()
        return self._commit("recover", login)
