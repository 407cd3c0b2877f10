# app/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Registered shopper.

    Identity:
      - id: numeric primary key, carried as the JWT "sub" claim
      - email: unique, stored lower-cased

    The plaintext password never reaches this table; only the Argon2
    encoded hash is stored.
    """

    __tablename__ = "users"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    name: str = Field(
        max_length=100,
        description="Customer display name",
    )

    email: str = Field(
        unique=True,
        index=True,
        max_length=255,
        description="Login email (lower-cased)",
    )

    password_hash: str = Field(
        description="Argon2 hash of the password",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
