# app/core/auth.py
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, ExpiredSignatureError, JWTError

from app.core.config import Settings, get_settings
from app.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

# Pinned: tokens signed with any other algorithm (including "none") are rejected.
JWT_ALGORITHM = "HS256"

# HTTP Bearer scheme:
# - auto_error=False => a missing header is reported through our own
#   AuthenticationError so every auth failure has the same response shape.
bearer_scheme = HTTPBearer(auto_error=False)

_password_hasher = PasswordHasher()


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Identity asserted by a verified access token, valid for one request."""

    user_id: int
    email: str


# ----- Passwords -----


def hash_password(password: str) -> str:
    """Hash a password using Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its stored Argon2 hash."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


@lru_cache
def dummy_password_hash() -> str:
    """Stand-in hash verified for unknown accounts, matching a real login's cost."""
    return _password_hasher.hash("no-such-account")


# ----- Tokens -----


def create_access_token(
    user_id: int,
    email: str,
    settings: Settings | None = None,
) -> str:
    """
    Issue a signed access token.

    Claims are limited to identity: sub (user id), email, iat, exp.
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=settings.JWT_ACCESS_TTL_MINUTES)
    claims = {
        "sub": str(user_id),
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(
    token: str,
    settings: Settings | None = None,
) -> AuthenticatedIdentity:
    """
    Decode and verify an access token.

    Verification:
      - signature (HS256 only, using JWT_SECRET)
      - expiration time (exp is required)
      - presence of sub/email claims

    Raises:
        AuthenticationError: if the token is malformed, unverifiable or expired.
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require_exp": True, "require_sub": True},
        )
    except ExpiredSignatureError:
        logger.warning("Rejected access token: expired")
        raise AuthenticationError("Invalid or expired token")
    except JWTError as exc:
        # Only the failure class is logged, never the token itself.
        logger.warning("Rejected access token: %s", type(exc).__name__)
        raise AuthenticationError("Invalid or expired token")

    email = payload.get("email")
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        user_id = None

    if user_id is None or not email:
        logger.warning("Rejected access token: missing identity claims")
        raise AuthenticationError("Invalid or expired token")

    return AuthenticatedIdentity(user_id=user_id, email=email)


# ----- Dependencies -----


def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedIdentity:
    """
    Enforce authentication.

    Resolves the bearer token into an AuthenticatedIdentity without
    touching any store, so rejected requests never reach a handler.

    Raises:
        AuthenticationError: missing credential ("Authentication required")
            or invalid/expired credential ("Invalid or expired token").
    """
    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError("Authentication required")
    return decode_access_token(credentials.credentials.strip())
