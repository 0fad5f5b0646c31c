# app/schemas/user.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, EmailStr, Field, field_validator

from app.core.security import BCRYPT_MAX_BYTES
from app.schemas.base import CamelModel


def _normalize_email(v: str) -> str:
    return v.strip().lower()


class UserRead(CamelModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: EmailStr
    name: str | None = None
    image: str | None = None
    created_at: datetime


class UserUpdate(CamelModel):
    """
    Partial profile update for authenticated users.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    image: str | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class RegisterRequest(CamelModel):
    """
    Payload for credential registration.

    Password must be 8..72 bytes (bcrypt ignores anything longer).
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=8)
    name: str | None = Field(default=None, max_length=100)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v) if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"password must be at most {BCRYPT_MAX_BYTES} bytes")
        return v

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class SignInRequest(CamelModel):
    """Payload for credential sign-in."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v) if isinstance(v, str) else v


class TokenResponse(CamelModel):
    """Session token issued after sign-in / registration."""

    access_token: str
    token_type: str = "bearer"
    user: UserRead
