# app/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import jwt, JWTError

from app.core.config import Settings

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


class InvalidTokenError(Exception):
    """Raised when a session token cannot be decoded or has expired."""


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a plaintext password with a fresh salt.

    The returned string embeds the salt and cost factor, so it is the
    only thing that needs to be stored.
    """
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        raise ValueError("password is too long")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Compare a plaintext password against a stored bcrypt hash.

    Returns False (never raises) for missing hashes, malformed hashes
    and over-long passwords.
    """
    if not password_hash:
        return False
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(raw, password_hash.encode("ascii"))
    except ValueError:
        return False


def create_access_token(
    settings: Settings,
    *,
    subject: str,
    email: str,
    name: str | None = None,
    expires_minutes: int | None = None,
) -> str:
    """
    Issue a signed session token for a user.

    Claims:
      - sub: user id
      - email, name
      - iat / exp
    """
    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    claims: dict[str, Any] = {
        "sub": subject,
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    if name:
        claims["name"] = name
    return jwt.encode(claims, settings.AUTH_SECRET, algorithm=settings.AUTH_JWT_ALG)


def decode_access_token(settings: Settings, token: str) -> dict[str, Any]:
    """
    Decode and verify a session token (JWT).

    Verification:
      - signature (using AUTH_SECRET)
      - expiration time (exp)

    Raises:
        InvalidTokenError: if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.AUTH_SECRET,
            algorithms=[settings.AUTH_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
