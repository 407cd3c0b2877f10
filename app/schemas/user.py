# app/schemas/user.py
from pydantic import ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import ApiModel


class RegisterRequest(ApiModel):
    """
    Payload for account creation.

    Validation rules:
      - email must be a valid EmailStr (normalized to lower case)
      - name cannot be empty or whitespace
      - password length 6..128
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(ApiModel):
    """Payload for password login."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserRead(ApiModel):
    """Public user profile. Never carries the password hash."""

    id: int
    name: str
    email: str


class AuthResponse(ApiModel):
    """Returned by register and login."""

    user: UserRead
    token: str
