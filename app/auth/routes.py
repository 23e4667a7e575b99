# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Account endpoints backed by Supabase Auth:
# - POST /auth/register, /auth/login, /auth/logout, /auth/refresh-token
# - POST /auth/forgot-password, PUT /auth/update-password
# - GET  /auth/profile, /auth/verify
#
# Supabase calls live in core/services/auth_service.py; these handlers
# only validate input and shape responses.
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status

from app.auth.dependencies import get_current_user, get_current_user_optional
from app.auth.models import (
    AuthUser,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UpdatePasswordRequest,
)
from app.config import settings
from app.exceptions import AuthRequestError
from core.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

MIN_PASSWORD_LENGTH = 6


def _check_password_length(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthRequestError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            suggestion="Choose a longer password",
        )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest) -> dict:
    """
    Create an account.

    Raises:
        400: Password too short or rejected by Supabase
        409: Email already registered
    """
    _check_password_length(body.password)

    user_data = {}
    if body.first_name:
        user_data["first_name"] = body.first_name
    if body.last_name:
        user_data["last_name"] = body.last_name

    user = AuthService.sign_up(body.email, body.password, user_data)

    # Development projects usually run with email confirmation disabled
    if settings.is_development:
        user["email_confirmed"] = True
        message = "User registered successfully. You can now sign in."
    else:
        message = "User registered successfully. Please check your email for verification."

    return {
        "success": True,
        "message": message,
        "data": {"user": user, "development_mode": settings.is_development},
    }


@router.post("/login")
async def login(body: LoginRequest) -> dict:
    """
    Sign in with email and password.

    Raises:
        401: Invalid credentials
    """
    result = AuthService.sign_in(body.email, body.password)
    return {"success": True, "message": "Login successful", "data": result}


@router.post("/logout")
async def logout(user: Optional[AuthUser] = Depends(get_current_user_optional)) -> dict:
    """Revoke the caller's session if a valid token was sent. Always succeeds."""
    if user and user.access_token:
        AuthService.sign_out(user.access_token)
    return {"success": True, "message": "Logout successful"}


@router.post("/refresh-token")
async def refresh_token(body: RefreshTokenRequest) -> dict:
    """
    Exchange a refresh token for new session tokens.

    Raises:
        401: Refresh token rejected
    """
    session = AuthService.refresh_session(body.refresh_token)
    return {"success": True, "data": {"session": session}}


@router.post("/forgot-password")
async def forgot_password(body: ForgotPasswordRequest) -> dict:
    AuthService.reset_password(body.email)
    return {"success": True, "message": "Password reset email sent successfully"}


@router.get("/profile")
async def get_profile(user: AuthUser = Depends(get_current_user)) -> dict:
    """
    Get the current user's account details from Supabase.

    Raises:
        401: If not authenticated
    """
    profile = AuthService.get_user(user.access_token)
    return {"success": True, "data": {"user": profile}}


@router.put("/update-password")
async def update_password(
    body: UpdatePasswordRequest,
    user: AuthUser = Depends(get_current_user),
) -> dict:
    """
    Change the current user's password.

    Raises:
        400: Passwords don't match, too short, or rejected by Supabase
    """
    if body.new_password != body.confirm_password:
        raise AuthRequestError("Passwords do not match")
    _check_password_length(body.new_password)

    AuthService.update_password(user.id, body.new_password)
    return {"success": True, "message": "Password updated successfully"}


@router.get("/verify")
async def verify_token(user: AuthUser = Depends(get_current_user)) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "success": True,
        "data": {
            "valid": True,
            "user_id": str(user.id),
            "email": user.email,
        },
    }
