"""
FastAPI dependencies for caller identity and authorization.

The identity service has already authenticated the caller; these
dependencies only turn the bearer token into the explicit user_id every
core operation takes:

  get_current_user_id (JWT -> user UUID)
      └── require_admin (JWT -> admin user UUID)   [admin claim]

Members can only act on their own wallet: routes pass the user_id from
the token to the service, never one taken from the request body. Admins
use the /admin endpoints, which take the target user from the path.
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from yieldwallet.security import decode_access_token


# Reads the "Authorization: Bearer <token>" header. tokenUrl points at the
# identity service's login endpoint (used by Swagger UI's "Authorize" button).
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_token_claims(token: str = Depends(oauth2_scheme)) -> dict:
    """
    Validate the JWT and return its claims.

    Raises:
        HTTPException 401: If the token is missing, expired, tampered with,
                           or carries no usable subject.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
        user_id_str: str | None = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        payload["user_id"] = uuid.UUID(user_id_str)
    except (JWTError, ValueError):
        raise credentials_exception

    return payload


async def get_current_user_id(
    claims: dict = Depends(get_token_claims),
) -> uuid.UUID:
    """The authenticated caller's user ID."""
    return claims["user_id"]


async def require_admin(
    claims: dict = Depends(get_token_claims),
) -> uuid.UUID:
    """
    Require the admin claim on the token.

    Raises:
        HTTPException 403: If the caller is not an admin.
    """
    if claims.get("admin") is not True:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return claims["user_id"]
