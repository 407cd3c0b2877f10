# app/core/config.py
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - JWT_SECRET (HS256 signing secret, at least 32 characters)

    Optional:
      - DATABASE_URL (defaults to a local SQLite file)
      - JWT_ACCESS_TTL_MINUTES (token lifetime, at most one day)
      - CART_MAX_QUANTITY (upper bound for a single line item)
      - SEED_CATALOG (insert the sample catalog on startup)
    """

    PROJECT_NAME: str = "Storefront Cart API"
    API_PREFIX: str = "/api"

    DATABASE_URL: str = "sqlite:///./storefront.db"
    DATABASE_ECHO: bool = False

    # JWT signing (the algorithm itself is fixed in app.core.auth)
    JWT_SECRET: str
    JWT_ACCESS_TTL_MINUTES: int = Field(default=120, ge=1, le=24 * 60)

    CART_MAX_QUANTITY: int = Field(default=999, ge=1)

    SEED_CATALOG: bool = True

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("JWT_SECRET")
    @classmethod
    def secret_strength(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
