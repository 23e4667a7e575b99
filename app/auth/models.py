# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data: the verified token identity
# plus request bodies for the /auth endpoints.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import Optional


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying Supabase. The raw token is kept for calls that
    need to act on the user's session (sign-out, profile lookup).
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
    access_token: Optional[str] = Field(default=None, repr=False)


class RegisterRequest(BaseModel):
    """
    Body of POST /auth/register.

    Password length is checked in the route so the error is a 400 with
    a readable message rather than a 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=3)
    password: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=3)


class UpdatePasswordRequest(BaseModel):
    """Body of PUT /auth/update-password."""
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(..., alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword")

