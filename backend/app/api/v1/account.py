"""
Account endpoints: login, registration, profile and lifecycle management.
"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.schemas.account import (
    ClaimsData,
    CreatedUser,
    DeleteUserRequest,
    LoginChangeResult,
    LoginRequest,
    RegistrationRequest,
    ShortUser,
    UpdatePasswordRequest,
    UpdateUserRequest,
    UserWithoutPassword,
)
from app.services.account_service import (
    AccountError,
    AccountForbiddenError,
    AccountService,
)
from app.services.user_store import UserNotFoundError
from app.utils.auth import get_current_identity, require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, AccountForbiddenError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/login", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
):
    """
    Login with login and password.

    Returns a signed bearer token valid for one day.
    """
    try:
        return AccountService(db).authenticate(request.login, request.password)
    except (AccountError, UserNotFoundError) as e:
        raise _to_http_error(e)


@router.post(
    "/registration", response_model=CreatedUser, status_code=status.HTTP_201_CREATED
)
async def registration(
    request: RegistrationRequest,
    admin: ClaimsData = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create a user account.

    Only administrators can register users; the acting administrator is
    recorded as the creator.
    """
    try:
        return AccountService(db).register(admin, request)
    except (AccountError, UserNotFoundError) as e:
        raise _to_http_error(e)


@router.put(
    "/update-user", response_model=UserWithoutPassword, status_code=status.HTTP_200_OK
)
async def update_user(
    request: UpdateUserRequest,
    identity: ClaimsData = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Update name, gender or birthday.

    Allowed for administrators and for the active user themself.
    """
    try:
        return AccountService(db).update_user(identity, request)
    except (AccountError, UserNotFoundError) as e:
        raise _to_http_error(e)


@router.put(
    "/update-login", response_model=LoginChangeResult, status_code=status.HTTP_200_OK
)
async def update_login(
    old_login: str = Query(..., alias="oldLogin", description="Current login"),
    new_login: str = Query(..., alias="newLogin", description="New login"),
    identity: ClaimsData = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Change a user's login; the new login must stay unique.

    When users rename themselves the response carries a fresh token.
    """
    try:
        return AccountService(db).change_login(identity, old_login, new_login)
    except (AccountError, UserNotFoundError) as e:
        raise _to_http_error(e)


@router.put(
    "/update-password",
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
)
async def update_password(
    request: UpdatePasswordRequest,
    identity: ClaimsData = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return AccountService(db).change_password(
            identity, request.login, request.password, request.confirm_password
        )
    except (AccountError, UserNotFoundError) as e:
        raise _to_http_error(e)


@router.get(
    "/active-users",
    response_model=List[UserWithoutPassword],
    status_code=status.HTTP_200_OK,
)
async def active_users(
    admin: ClaimsData = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Active users ordered by creation time."""
    return AccountService(db).list_active_users()


@router.get(
    "/user-short-data", response_model=ShortUser, status_code=status.HTTP_200_OK
)
async def user_short_data(
    login: str = Query(..., description="User login"),
    admin: ClaimsData = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return AccountService(db).get_short_data(login)
    except (AccountError, UserNotFoundError) as e:
        raise _to_http_error(e)


@router.get(
    "/profile", response_model=UserWithoutPassword, status_code=status.HTTP_200_OK
)
async def profile(
    login: str = Query(..., description="Own login"),
    password: str = Query(..., description="Own password"),
    identity: ClaimsData = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Own profile, re-validated with the password.

    The queried login must match the token's login.
    """
    try:
        return AccountService(db).get_profile(identity, login, password)
    except (AccountError, UserNotFoundError) as e:
        raise _to_http_error(e)


@router.get(
    "/user-oldes",
    response_model=List[UserWithoutPassword],
    status_code=status.HTTP_200_OK,
)
async def users_over_age(
    age: int = Query(10, description="Age threshold in years (0-100)"),
    admin: ClaimsData = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Users older than the given age, ordered by birthday."""
    try:
        return AccountService(db).list_users_over_age(age)
    except AccountError as e:
        raise _to_http_error(e)


@router.delete("/delete", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
async def delete_user(
    request: DeleteUserRequest,
    admin: ClaimsData = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Delete a user.

    Soft deletion stamps the revoked fields; hard deletion removes the row.
    """
    try:
        return AccountService(db).delete_user(admin, request.login, request.soft_delete)
    except (AccountError, UserNotFoundError) as e:
        raise _to_http_error(e)


@router.put(
    "/user-recovery", response_class=PlainTextResponse, status_code=status.HTTP_200_OK
)
async def user_recovery(
    login: str = Query(..., description="Login of the soft-deleted user"),
    admin: ClaimsData = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Recover a soft-deleted user by clearing the revoked fields."""
    try:
        return AccountService(db).recover_user(admin, login)
    except (AccountError, UserNotFoundError) as e:
        raise _to_http_error(e)
