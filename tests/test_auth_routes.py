# =============================================================================
# tests/test_auth_routes.py - Auth Endpoint Tests
# =============================================================================
# AuthService is patched in the routes module; tokens for protected
# endpoints are real HS256 JWTs signed with the test secret.
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.exceptions import AuthenticationFailedError, EmailAlreadyRegisteredError
from app.main import app
from core.services.auth_service import AuthService, serialize_session, serialize_user
from tests.conftest import USER_ID

API = f"{settings.API_PREFIX}/auth"

USER = {
    "id": USER_ID,
    "email": "ada@example.com",
    "email_confirmed": False,
    "created_at": "2024-05-01T12:00:00+00:00",
    "last_sign_in": None,
}
SESSION = {"access_token": "access-1", "refresh_token": "refresh-1", "expires_at": 1714651200}


@pytest.fixture
def client():
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_service():
    with patch("app.auth.routes.AuthService") as mock:
        mock.sign_up.return_value = dict(USER)
        mock.sign_in.return_value = {"user": USER, "session": SESSION}
        mock.refresh_session.return_value = SESSION
        mock.get_user.return_value = USER
        yield mock


# =============================================================================
# Register / Login
# =============================================================================

class TestRegister:
    def test_register(self, client, auth_service):
        response = client.post(f"{API}/register", json={
            "email": "ada@example.com",
            "password": "hunter22",
            "firstName": "Ada",
        })

        assert response.status_code == 201
        data = response.json()["data"]
        # Test environment runs in development mode
        assert data["development_mode"] is True
        assert data["user"]["email_confirmed"] is True
        auth_service.sign_up.assert_called_once_with(
            "ada@example.com", "hunter22", {"first_name": "Ada"}
        )

    def test_short_password(self, client, auth_service):
        response = client.post(f"{API}/register", json={"email": "ada@example.com", "password": "abc"})

        assert response.status_code == 400
        assert "at least 6 characters" in response.json()["detail"]
        auth_service.sign_up.assert_not_called()

    def test_duplicate_email(self, client, auth_service):
        auth_service.sign_up.side_effect = EmailAlreadyRegisteredError("ada@example.com")

        response = client.post(f"{API}/register", json={"email": "ada@example.com", "password": "hunter22"})

        assert response.status_code == 409
        assert response.json()["code"] == "EMAIL_ALREADY_REGISTERED"

    def test_missing_fields(self, client, auth_service):
        response = client.post(f"{API}/register", json={"email": "ada@example.com"})

        assert response.status_code == 422


class TestLogin:
    def test_login(self, client, auth_service):
        response = client.post(f"{API}/login", json={"email": "ada@example.com", "password": "hunter22"})

        assert response.status_code == 200
        assert response.json()["data"] == {"user": USER, "session": SESSION}

    def test_bad_credentials(self, client, auth_service):
        auth_service.sign_in.side_effect = AuthenticationFailedError()

        response = client.post(f"{API}/login", json={"email": "ada@example.com", "password": "wrong!"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid login credentials"


# =============================================================================
# Session Endpoints
# =============================================================================

class TestLogout:
    def test_with_token(self, client, auth_service, auth_headers):
        response = client.post(f"{API}/logout", headers=auth_headers)

        assert response.status_code == 200
        auth_service.sign_out.assert_called_once()

    def test_without_token(self, client, auth_service):
        response = client.post(f"{API}/logout")

        assert response.status_code == 200
        auth_service.sign_out.assert_not_called()

    def test_with_invalid_token(self, client, auth_service):
        response = client.post(f"{API}/logout", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 200
        assert response.json()["success"] is True


class TestRefresh:
    def test_refresh(self, client, auth_service):
        response = client.post(f"{API}/refresh-token", json={"refresh_token": "refresh-0"})

        assert response.status_code == 200
        assert response.json()["data"]["session"] == SESSION
        auth_service.refresh_session.assert_called_once_with("refresh-0")

    def test_rejected(self, client, auth_service):
        auth_service.refresh_session.side_effect = AuthenticationFailedError("Invalid refresh token")

        response = client.post(f"{API}/refresh-token", json={"refresh_token": "stale"})

        assert response.status_code == 401


class TestForgotPassword:
    def test_sends_reset(self, client, auth_service):
        response = client.post(f"{API}/forgot-password", json={"email": "ada@example.com"})

        assert response.status_code == 200
        auth_service.reset_password.assert_called_once_with("ada@example.com")


# =============================================================================
# Authenticated Endpoints
# =============================================================================

class TestProfile:
    def test_profile(self, client, auth_service, auth_headers):
        response = client.get(f"{API}/profile", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == USER_ID
        token = auth_headers["Authorization"].removeprefix("Bearer ")
        auth_service.get_user.assert_called_once_with(token)

    def test_requires_token(self, client, auth_service):
        assert client.get(f"{API}/profile").status_code == 401


class TestUpdatePassword:
    def test_update(self, client, auth_service, auth_headers):
        response = client.put(
            f"{API}/update-password",
            json={"newPassword": "correct-horse", "confirmPassword": "correct-horse"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        user_id, password = auth_service.update_password.call_args.args
        assert str(user_id) == USER_ID
        assert password == "correct-horse"

    def test_mismatch(self, client, auth_service, auth_headers):
        response = client.put(
            f"{API}/update-password",
            json={"newPassword": "correct-horse", "confirmPassword": "battery-staple"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Passwords do not match"
        auth_service.update_password.assert_not_called()

    def test_too_short(self, client, auth_service, auth_headers):
        response = client.put(
            f"{API}/update-password",
            json={"newPassword": "abc", "confirmPassword": "abc"},
            headers=auth_headers,
        )

        assert response.status_code == 400


class TestVerify:
    def test_verify(self, client, auth_headers):
        response = client.get(f"{API}/verify", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {
            "valid": True,
            "user_id": USER_ID,
            "email": "ada@example.com",
        }


# =============================================================================
# AuthService
# =============================================================================

class TestAuthService:
    @pytest.fixture
    def supabase(self):
        with patch("core.services.auth_service.SupabaseClient") as client_cls:
            yield client_cls

    def test_sign_up_duplicate(self, supabase):
        auth = supabase.create_auth_client.return_value.auth
        auth.sign_up.side_effect = Exception("User already registered")

        with pytest.raises(EmailAlreadyRegisteredError):
            AuthService.sign_up("ada@example.com", "hunter22")

    def test_sign_in_failure(self, supabase):
        auth = supabase.create_auth_client.return_value.auth
        auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

        with pytest.raises(AuthenticationFailedError):
            AuthService.sign_in("ada@example.com", "wrong")

    def test_sign_out_never_raises(self, supabase):
        supabase.get_client.return_value.auth.admin.sign_out.side_effect = Exception("expired")

        assert AuthService.sign_out("token") is False

    def test_serializers(self):
        user = MagicMock(
            id=USER_ID,
            email="ada@example.com",
            email_confirmed_at="2024-05-01T12:00:00+00:00",
            created_at="2024-05-01T11:00:00+00:00",
            last_sign_in_at=None,
        )
        session = MagicMock(access_token="a", refresh_token="r", expires_at=123)

        assert serialize_user(user)["email_confirmed"] is True
        assert serialize_user(user)["last_sign_in"] is None
        assert serialize_session(session) == {"access_token": "a", "refresh_token": "r", "expires_at": 123}
