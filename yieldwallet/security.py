"""
Security utilities: bearer token issuing and verification.

Identity is owned by an external service. That service signs a JWT with the
shared SECRET_KEY (HS256) and hands it to the client; this service only
verifies the signature and reads the claims:

  - "sub":   the user ID (UUID string), the only identity the core accepts
  - "admin": true for operators allowed on the /admin endpoints
  - "exp":   expiration timestamp, after which the token is rejected

create_access_token() is the same signing routine the identity service runs;
it lives here so demo tooling and tests can mint tokens.
"""

import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt

from yieldwallet.config import settings


def create_access_token(
    user_id: uuid.UUID,
    is_admin: bool = False,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        user_id: The subject of the token.
        is_admin: Whether the bearer may call admin endpoints.
        expires_delta: Optional custom expiration time. Defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.

    Returns:
        An encoded JWT string.
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode = {"sub": str(user_id), "admin": is_admin, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT access token.

    Raises:
        JWTError: If the token is expired, tampered with, or invalid.

    Returns:
        The decoded payload dictionary (contains "sub", "admin", "exp").
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
