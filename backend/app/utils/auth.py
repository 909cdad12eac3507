"""
Authentication utilities: JWT token validation and role checks.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.schemas.account import ClaimsData
from app.utils.jwt import decode_access_token

security = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> ClaimsData:
    """
    Extract and validate the caller's identity from the JWT token.

    This is a FastAPI dependency that can be used in route handlers.

    Args:
        credentials: HTTP Bearer token from Authorization header

    Returns:
        ClaimsData (login and admin flag) from token

    Raises:
        HTTPException: 401 if token is invalid or missing
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = decode_access_token(credentials.credentials)

    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return identity


def require_admin(
    identity: ClaimsData = Depends(get_current_identity),
) -> ClaimsData:
    """
    Same as get_current_identity, but only lets administrators through.

    Raises:
        HTTPException: 403 if the caller is not an administrator
    """
    if not identity.admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return identity
