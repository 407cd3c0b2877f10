# app/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import AuthenticatedIdentity, require_auth
from app.database import get_session
from app.repositories.user_repo import UserRepository
from app.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserRead
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
service = AuthService(repo)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
):
    """
    Create an account and return it together with an access token.
    """
    return service.register(session, payload)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
):
    """
    Exchange email and password for an access token.
    """
    return service.login(session, payload)


@router.get("/me", response_model=UserRead)
def read_me(
    identity: AuthenticatedIdentity = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """
    Return the authenticated user's profile.

    Auth:
      - Requires a valid bearer token.
    """
    return service.get_me(session, identity)
