# app/services/auth_service.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.auth import (
    AuthenticatedIdentity,
    create_access_token,
    dummy_password_hash,
    hash_password,
    verify_password,
)
from app.core.errors import AuthenticationError, ConflictError
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserRead

logger = logging.getLogger(__name__)


class AuthService:
    """
    Business logic for accounts.

    Responsibilities:
      - enforce email uniqueness on registration
      - hash passwords before they reach the store
      - verify credentials and issue access tokens
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def _issue(self, user: User) -> AuthResponse:
        return AuthResponse(
            user=UserRead.model_validate(user),
            token=create_access_token(user.id, user.email),
        )

    def register(self, session: Session, payload: RegisterRequest) -> AuthResponse:
        """
        Create an account and log it in.

        Raises:
            ConflictError: if the email is already registered.
        """
        if self.repo.get_by_email(session, payload.email) is not None:
            raise ConflictError("User already exists")

        user = User(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
        )
        try:
            user = self.repo.create(session, user)
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email.
            raise ConflictError("User already exists")

        logger.info("Registered user id=%s", user.id)
        return self._issue(user)

    def login(self, session: Session, payload: LoginRequest) -> AuthResponse:
        """
        Exchange email/password for a token.

        Unknown email and wrong password produce the same error.
        """
        user = self.repo.get_by_email(session, payload.email)
        if user is None:
            verify_password(payload.password, dummy_password_hash())
            raise AuthenticationError("Invalid credentials")
        if not verify_password(payload.password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return self._issue(user)

    def get_me(self, session: Session, identity: AuthenticatedIdentity) -> User:
        """
        Resolve the authenticated identity to its stored profile.

        A valid token for a user that no longer exists is treated as invalid.
        """
        user = self.repo.get_by_id(session, identity.user_id)
        if user is None:
            raise AuthenticationError("Invalid or expired token")
        return user
