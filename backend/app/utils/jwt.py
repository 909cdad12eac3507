"""
JWT token utilities for authentication.

Handles encoding and decoding JWT tokens carrying the user's login and role.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from pydantic_settings import BaseSettings

from app.schemas.account import ClaimsData

ADMIN_ROLE = "Admin"
USER_ROLE = "User"


class JWTSettings(BaseSettings):
    """JWT configuration settings."""

    signing_key: str = "your-secret-key-change-in-production"  # Should be in env
    issuer: str = "accounts-api"
    audience: str = "accounts-api-clients"
    algorithm: str = "HS512"
    access_token_expire_minutes: int = 60 * 24  # 1 day

    class Config:
        env_prefix = "JWT_"
        env_file = ".env"
        extra = "ignore"


jwt_settings = JWTSettings()


def create_access_token(login: str, is_admin: bool) -> str:
    """
    Create a JWT access token for a user.

    Args:
        login: The user's login
        is_admin: Whether the user holds the administrator role

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=jwt_settings.access_token_expire_minutes)
    payload = {
        "sub": login,
        "role": ADMIN_ROLE if is_admin else USER_ROLE,
        "iss": jwt_settings.issuer,
        "aud": jwt_settings.audience,
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(
        payload, jwt_settings.signing_key, algorithm=jwt_settings.algorithm
    )


def decode_access_token(token: str) -> Optional[ClaimsData]:
    """
    Decode and validate a JWT access token.

    Signature, expiry, issuer and audience are all checked.

    Args:
        token: JWT token string

    Returns:
        ClaimsData if token is valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            jwt_settings.signing_key,
            algorithms=[jwt_settings.algorithm],
            audience=jwt_settings.audience,
            issuer=jwt_settings.issuer,
        )
    except JWTError:
        return None

    login = payload.get("sub")
    role = payload.get("role")
    if not login or role not in (ADMIN_ROLE, USER_ROLE):
        return None
    return ClaimsData(login=login, admin=role == ADMIN_ROLE)
