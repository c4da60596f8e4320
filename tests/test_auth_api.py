"""Tests for the Supabase Auth pass-through endpoints."""

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.core.auth_middleware import AuthContext, require_auth
from app.main import app

USER_ID = uuid4()


@pytest.fixture
def client():
    return TestClient(app, raise_server_exceptions=False)


class TestSignUp:
    @patch("app.api.auth.create_auth_client")
    def test_sign_up(self, mock_client, client):
        mock_client.return_value.auth.sign_up.return_value = MagicMock(user=MagicMock(id=str(USER_ID)))

        response = client.post(
            "/v1/auth/signup",
            json={"email": "ada@example.com", "password": "secret123", "name": "Ada"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "user_id": str(USER_ID)}
        payload = mock_client.return_value.auth.sign_up.call_args.args[0]
        assert payload["options"]["data"]["full_name"] == "Ada"

    @patch("app.api.auth.create_auth_client")
    def test_sign_up_rejected(self, mock_client, client):
        mock_client.return_value.auth.sign_up.side_effect = Exception("User already registered")

        response = client.post(
            "/v1/auth/signup",
            json={"email": "ada@example.com", "password": "secret123", "name": "Ada"},
        )

        assert response.status_code == 400

    def test_invalid_email(self, client):
        response = client.post(
            "/v1/auth/signup",
            json={"email": "not-an-email", "password": "secret123", "name": "Ada"},
        )
        assert response.status_code == 400


class TestLogin:
    @patch("app.api.auth.create_auth_client")
    def test_login(self, mock_client, client):
        session = MagicMock(access_token="access", refresh_token="refresh", expires_in=3600)
        mock_client.return_value.auth.sign_in_with_password.return_value = MagicMock(
            session=session, user=MagicMock(id=str(USER_ID))
        )

        response = client.post("/v1/auth/login", json={"email": "ada@example.com", "password": "secret123"})

        assert response.status_code == 200
        body = response.json()
        assert body["access_token"] == "access"
        assert body["user_id"] == str(USER_ID)

    @patch("app.api.auth.create_auth_client")
    def test_wrong_password(self, mock_client, client):
        mock_client.return_value.auth.sign_in_with_password.side_effect = Exception("Invalid login")

        response = client.post("/v1/auth/login", json={"email": "ada@example.com", "password": "wrong-pw"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"


class TestSessionRoutes:
    @pytest.fixture
    def authed(self):
        app.dependency_overrides[require_auth] = lambda: AuthContext(
            user_id=USER_ID,
            token="token-1",
            email="ada@example.com",
            user_metadata={"full_name": "Ada"},
        )
        yield
        app.dependency_overrides.pop(require_auth, None)

    def test_me(self, client, authed):
        response = client.get("/v1/auth/me")

        assert response.status_code == 200
        assert response.json() == {
            "id": str(USER_ID),
            "email": "ada@example.com",
            "name": "Ada",
            "avatar_url": None,
        }

    @patch("app.api.auth.get_supabase")
    def test_logout(self, mock_sb, client, authed):
        response = client.post("/v1/auth/logout")

        assert response.status_code == 200
        mock_sb.return_value.auth.admin.sign_out.assert_called_once_with("token-1")

    def test_me_requires_auth(self, client):
        assert client.get("/v1/auth/me").status_code == 401
