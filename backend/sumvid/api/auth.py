"""Bearer token verification.

Tokens are HS256 JWTs signed with ``JWT_SECRET``. The user id is read from
the ``userId`` claim, falling back to ``sub``.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from sumvid.core.config import settings
from sumvid.core.exceptions import UnauthorizedException


def issue_token(user_id: int, expires_in: Optional[timedelta] = None) -> str:
    """Mint a bearer token for a user."""
    now = datetime.now(timezone.utc)
    expires_in = expires_in or timedelta(hours=settings.JWT_EXPIRES_HOURS)
    payload = {
        "userId": user_id,
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def authenticate(token: Optional[str]) -> int:
    """Verify a bearer token and return the user id it carries.

    Raises:
        UnauthorizedException: If the token is missing, invalid, expired or
            carries no usable user id.
    """
    if not token:
        raise UnauthorizedException("Access token required")

    try:
        claims: dict[str, Any] = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedException("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise UnauthorizedException("Invalid token") from e

    raw = claims.get("userId", claims.get("sub"))
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise UnauthorizedException("Token carries no user id") from e


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
