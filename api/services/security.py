"""
Security helpers — password hashing and session tokens.

  - Passwords hashed with bcrypt
  - Access tokens: short-lived JWT, type "access"
  - Refresh tokens: long-lived JWT, type "refresh", carrying the profile's
    token_version so that sign-out can revoke every outstanding refresh token
"""

import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from config import settings

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Raised when a token is expired, malformed or of the wrong type."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def _encode(profile_id: uuid.UUID, token_type: str, ttl_sec: int, **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(profile_id),
        "type": token_type,
        "iat": now,
        "exp": now + timedelta(seconds=ttl_sec),
        "jti": uuid.uuid4().hex,
        **claims,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_access_token(profile_id: uuid.UUID, is_admin: bool) -> str:
    return _encode(profile_id, ACCESS, settings.ACCESS_TOKEN_TTL_SEC, admin=is_admin)


def create_refresh_token(profile_id: uuid.UUID, token_version: int) -> str:
    return _encode(profile_id, REFRESH, settings.REFRESH_TOKEN_TTL_SEC, ver=token_version)


def decode_token(token: str, expected_type: str) -> dict:
    """
    Decode and check a token.

    Returns:
        The JWT payload.

    Raises:
        TokenError: expired, invalid signature, or not of expected_type.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise TokenError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenError("Invalid token") from e

    if payload.get("type") != expected_type:
        raise TokenError("Invalid token type")
    return payload
