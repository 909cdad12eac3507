"""
Request and response models for account operations.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class ClaimsData:
    """Identity carried by a bearer token: login and admin flag."""

    login: str
    admin: bool


class LoginRequest(BaseModel):
    """User login request."""

    login: str = Field(..., description="User login")
    password: str = Field(..., description="User password")


class RegistrationRequest(BaseModel):
    """User registration request (administrators only)."""

    login: str = Field(..., description="Latin letters and digits only")
    password: str = Field(..., description="Latin letters and digits only")
    name: str = Field(..., description="Latin or Cyrillic letters only")
    gender: int = Field(..., description="0 - female, 1 - male, 2 - unknown")
    birthday: Optional[date] = Field(None, description="Date of birth")
    admin: bool = Field(..., description="Grant administrator role")


class UpdateUserRequest(BaseModel):
    """Profile update request; omitted fields are left unchanged."""

    login: str = Field(..., description="Login of the user to update")
    name: Optional[str] = None
    gender: Optional[int] = None
    birthday: Optional[date] = None


class UpdatePasswordRequest(BaseModel):
    """Password change request."""

    model_config = ConfigDict(populate_by_name=True)

    login: str = Field(..., description="Login of the user to update")
    password: str
    confirm_password: str = Field(..., alias="confirmPassword")


class DeleteUserRequest(BaseModel):
    """User removal request."""

    model_config = ConfigDict(populate_by_name=True)

    login: str = Field(..., description="Login of the user to delete")
    soft_delete: bool = Field(
        True, alias="softDelete", description="Mark as revoked instead of removing"
    )


class CreatedUser(BaseModel):
    """User data returned right after registration."""

    model_config = ConfigDict(from_attributes=True)

    guid: UUID
    login: str
    name: str
    gender: int
    birthday: Optional[date]
    admin: bool
    created_on: datetime
    created_by: str


class UserWithoutPassword(BaseModel):
    """Full user record minus the password hash."""

    model_config = ConfigDict(from_attributes=True)

    guid: UUID
    login: str
    name: str
    gender: int
    birthday: Optional[date]
    admin: bool
    created_on: datetime
    created_by: str
    modified_on: Optional[datetime]
    modified_by: Optional[str]
    revoked_on: Optional[datetime]
    revoked_by: Optional[str]


class ShortUser(BaseModel):
    """Short user data: name, gender, birthday and activity status."""

    name: str
    gender: int
    birthday: Optional[date]
    active_status: bool


class LoginChangeResult(BaseModel):
    """Result of a login change; token is set only for self-renames."""

    metadata: UserWithoutPassword
    token: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    message: str


