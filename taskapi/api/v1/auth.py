from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskapi.database import get_db
from taskapi.dependencies import get_current_user, get_auth_service
from taskapi.models.user import User
from taskapi.schemas.auth import (
    AuthResponse, LoginRequest, LogoutRequest, RefreshTokenRequest, RegisterRequest,
)
from taskapi.schemas.common import SuccessResponse, success_response
from taskapi.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


# ─── POST /auth/register ──────────────────────────────────────────────────────
@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
    response_model=SuccessResponse[AuthResponse],
)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Register a new user and start a session.
    - Email must be unique.
    - Password minimum 6 characters.
    """
    result = auth_service.register(db, data)
    return success_response("Registration successful", result)


# ─── POST /auth/login ─────────────────────────────────────────────────────────
@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    summary="Login and receive access + refresh tokens",
    response_model=SuccessResponse[AuthResponse],
)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Authenticate user.
    Returns accessToken (1 hour) and refreshToken (7 days).
    """
    result = auth_service.login(db, data)
    return success_response("Login successful", result)


# ─── POST /auth/refresh-token ─────────────────────────────────────────────────
@router.post(
    "/refresh-token",
    status_code=status.HTTP_200_OK,
    summary="Exchange a refresh token for a new token pair",
    response_model=SuccessResponse[AuthResponse],
)
def refresh_token(
    data: RefreshTokenRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """The presented refresh token is revoked; use the returned one next time."""
    result = auth_service.refresh(db, data.refreshToken)
    return success_response("Token refreshed", result)


# ─── POST /auth/logout ────────────────────────────────────────────────────────
@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    summary="Revoke refresh token (logout)",
    response_model=SuccessResponse,
)
def logout(
    data: LogoutRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.logout(db, data.refreshToken)
    return success_response("Successfully logged out", None)


# ─── POST /auth/logout-all ────────────────────────────────────────────────────
@router.post(
    "/logout-all",
    status_code=status.HTTP_200_OK,
    summary="Revoke every refresh token of the current user",
    response_model=SuccessResponse,
)
def logout_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.logout_all(db, current_user.id)
    return success_response("Successfully logged out from all devices", None)
