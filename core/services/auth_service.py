# =============================================================================
# core/services/auth_service.py - Supabase Auth Operations
# =============================================================================
# Wraps supabase-py auth calls and maps Supabase's error messages onto the
# API's exceptions:
# - sign_up: "User already registered" -> 409, other rejections -> 400
# - sign_in / refresh_session: any rejection -> 401
# - sign_out: best effort, never raises
#
# Sign-in style calls store the session on the client object, so each call
# uses a fresh anon client from SupabaseClient.create_auth_client().
# Admin operations (password update, sign-out) use the service client.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from app.config import settings
from app.exceptions import (
    AuthenticationFailedError,
    AuthRequestError,
    EmailAlreadyRegisteredError,
)

logger = logging.getLogger(__name__)


def _iso(value: Any) -> str | None:
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def serialize_user(user: Any) -> dict[str, Any]:
    """Reduce a Supabase user object to the fields the API exposes."""
    return {
        "id": str(user.id),
        "email": user.email,
        "email_confirmed": getattr(user, "email_confirmed_at", None) is not None,
        "created_at": _iso(getattr(user, "created_at", None)),
        "last_sign_in": _iso(getattr(user, "last_sign_in_at", None)),
    }


def serialize_session(session: Any) -> dict[str, Any]:
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_at": session.expires_at,
    }


class AuthService:
    """Service for Supabase Auth operations."""

    @staticmethod
    def sign_up(
        email: str,
        password: str,
        user_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Register a new user.

        Returns:
            Serialized user dict

        Raises:
            EmailAlreadyRegisteredError: If the email is taken
            AuthRequestError: For any other rejection
        """
        client = SupabaseClient.create_auth_client()

        try:
            response = client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": user_data or {}},
            })
        except Exception as e:
            error = str(e)
            logger.warning(f"Sign-up rejected for {email}: {error}")

            if "User already registered" in error:
                raise EmailAlreadyRegisteredError(email)
            if "Invalid email" in error:
                raise AuthRequestError("Please enter a valid email address")
            if "Password" in error:
                raise AuthRequestError(
                    "Password does not meet requirements",
                    suggestion="Use at least 6 characters",
                )
            raise AuthRequestError(error)

        if response.user is None:
            raise AuthRequestError("Sign-up did not return a user")

        logger.info(f"Registered user: {response.user.id}")
        return serialize_user(response.user)

    @staticmethod
    def sign_in(email: str, password: str) -> dict[str, Any]:
        """
        Sign in with email and password.

        Returns:
            {"user": {...}, "session": {access_token, refresh_token, expires_at}}

        Raises:
            AuthenticationFailedError: On bad credentials
        """
        client = SupabaseClient.create_auth_client()

        try:
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning(f"Sign-in failed for {email}: {e}")
            raise AuthenticationFailedError(str(e) or "Invalid login credentials")

        if response.session is None:
            raise AuthenticationFailedError()

        logger.info(f"User signed in: {response.user.id}")
        return {
            "user": serialize_user(response.user),
            "session": serialize_session(response.session),
        }

    @staticmethod
    def sign_out(access_token: str) -> bool:
        """
        Revoke a user's sessions.

        Returns:
            True if Supabase accepted the sign-out, False otherwise
        """
        try:
            SupabaseClient.get_client().auth.admin.sign_out(access_token)
            return True
        except Exception as e:
            logger.warning(f"Sign-out failed (ignored): {e}")
            return False

    @staticmethod
    def refresh_session(refresh_token: str) -> dict[str, Any]:
        """
        Exchange a refresh token for a new session.

        Raises:
            AuthenticationFailedError: If the refresh token is rejected
        """
        client = SupabaseClient.create_auth_client()

        try:
            response = client.auth.refresh_session(refresh_token)
        except Exception as e:
            logger.warning(f"Token refresh failed: {e}")
            raise AuthenticationFailedError(str(e) or "Invalid refresh token")

        if response.session is None:
            raise AuthenticationFailedError("Invalid refresh token")

        return serialize_session(response.session)

    @staticmethod
    def reset_password(email: str) -> None:
        """
        Send a password reset email.

        Raises:
            AuthRequestError: If Supabase rejects the request
        """
        client = SupabaseClient.create_auth_client()
        redirect_to = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password"

        try:
            client.auth.reset_password_for_email(email, {"redirect_to": redirect_to})
        except Exception as e:
            logger.warning(f"Password reset failed for {email}: {e}")
            raise AuthRequestError(str(e))

        logger.info(f"Password reset email requested for {email}")

    @staticmethod
    def update_password(user_id: UUID | str, new_password: str) -> None:
        """
        Set a new password for a user.

        Raises:
            AuthRequestError: If Supabase rejects the new password
        """
        client = SupabaseClient.get_client()

        try:
            client.auth.admin.update_user_by_id(str(user_id), {"password": new_password})
        except Exception as e:
            logger.warning(f"Password update failed for {user_id}: {e}")
            raise AuthRequestError(str(e))

        logger.info(f"Password updated for user: {user_id}")

    @staticmethod
    def get_user(access_token: str) -> dict[str, Any]:
        """
        Fetch the full user record for a token.

        Raises:
            AuthenticationFailedError: If Supabase doesn't recognize the token
        """
        try:
            response = SupabaseClient.get_client().auth.get_user(access_token)
        except Exception as e:
            logger.warning(f"User lookup failed: {e}")
            raise AuthenticationFailedError("Invalid or expired token")

        if response is None or response.user is None:
            raise AuthenticationFailedError("Invalid or expired token")

        return serialize_user(response.user)
