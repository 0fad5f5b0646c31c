# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - id: stable user identifier carried as "sub" in session tokens

    A row is created either on first federated sign-in (auto-provisioned
    from token claims) or by credential registration / seeding. Only the
    latter have a password_hash; the plaintext password is never stored.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(
        unique=True,
        index=True,
        max_length=255,
    )

    name: str | None = Field(
        default=None,
        max_length=100,
        description="Display name; first part of email by default",
    )

    password_hash: str | None = Field(
        default=None,
        description="bcrypt hash for credential sign-in",
    )

    image: str | None = Field(
        default=None,
        description="Avatar URL",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
