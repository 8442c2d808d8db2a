"""Password hashing and access tokens.

Tokens are HS256 JWTs whose claims identify the user (``sub``), their login
name and role. Role checks read the claim but the account itself is looked
up again on every request (see ``storeroom.core.rbac``).
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt
from jwt.exceptions import PyJWTError

from storeroom.core.config import settings

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["exp", "sub"]


def get_password_hash(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored hash. A malformed hash never matches."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.warning(f"Password verification error: {e}")
        return False


def user_claims(user) -> dict[str, Any]:
    """Identity claims carried in a user's access token."""
    return {"sub": str(user.id), "username": user.username, "role": user.role.value}


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Sign ``data`` into a token that expires after ``expires_delta``.

    Defaults to ``ACCESS_TOKEN_EXPIRE_MINUTES``. Every token gets its own
    ``jti`` so two tokens issued in the same second still differ.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        **data,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Return the token's claims, or None if it is malformed, tampered or expired."""
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
    except PyJWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None
