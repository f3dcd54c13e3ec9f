"""Tests for authentication API handlers."""

from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient

from src.cityrun.exceptions import StoreUnavailableError
from src.cityrun.main import app
from src.cityrun.services.auth import get_auth_service


@pytest.fixture(autouse=True)
def mock_posthog():
    """Auto-mock PostHogService for all tests."""
    with patch("src.cityrun.features.auth.handlers.PostHogService") as mock:
        mock_instance = Mock()
        mock.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def auth_client(client: TestClient, auth_service) -> TestClient:
    """Client backed by the in-memory AuthService."""
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    return client


def register(client: TestClient, email: str = "runner@example.com", password: str = "s3cret-pass"):
    return client.post(
        "/api/auth/register", json={"email": email, "password": password, "display_name": "Runner"}
    )


def login(client: TestClient, email: str = "runner@example.com", password: str = "s3cret-pass"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


class TestRegister:
    """Tests for POST /api/auth/register."""

    def test_register_success(self, auth_client: TestClient, mock_posthog: Mock) -> None:
        """Test registration returns the public user without a session."""
        response = register(auth_client)

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "runner@example.com"
        assert data["display_name"] == "Runner"
        assert "password_hash" not in data
        assert "set-cookie" not in response.headers
        assert mock_posthog.capture.call_args.kwargs["event"] == "user_registered"

    def test_register_duplicate(self, auth_client: TestClient) -> None:
        """Test a second registration for the same email is 409."""
        register(auth_client)

        response = register(auth_client, email="RUNNER@example.com")

        assert response.status_code == 409
        assert response.json()["error"] == "CONFLICT"

    def test_register_blank_password(self, auth_client: TestClient) -> None:
        """Test a blank password is a validation error."""
        response = register(auth_client, password="   ")

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_register_multibyte_password_over_72_bytes(self, auth_client: TestClient) -> None:
        """Test a 25-character Hangul password (73 bytes) is rejected."""
        response = register(auth_client, password="가" * 24 + "A")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert "72 bytes" in body["message"]


class TestLogin:
    """Tests for POST /api/auth/login."""

    def test_login_sets_session_cookie(self, auth_client: TestClient, mock_posthog: Mock) -> None:
        """Test login returns the session ID and sets it as an HttpOnly cookie."""
        user_id = register(auth_client).json()["id"]

        response = login(auth_client)

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == user_id
        assert data["session_id"]
        assert response.cookies.get("SESSION") == data["session_id"]

        set_cookie = response.headers["set-cookie"].lower()
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie
        assert "max-age=1800" in set_cookie
        assert mock_posthog.capture.call_args.kwargs["event"] == "user_logged_in"

    def test_wrong_password(self, auth_client: TestClient) -> None:
        """Test a wrong password is 401 INVALID_CREDENTIALS."""
        register(auth_client)

        response = login(auth_client, password="wrong-pass")

        assert response.status_code == 401
        assert response.json() == {"error": "INVALID_CREDENTIALS", "message": "Invalid email or password"}

    def test_unknown_email_looks_the_same(self, auth_client: TestClient) -> None:
        """Test an unknown email is indistinguishable from a wrong password."""
        response = login(auth_client, email="nobody@example.com")

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_CREDENTIALS"


class TestSession:
    """Tests for GET /api/auth/session and POST /api/auth/logout."""

    def test_session_from_cookie(self, auth_client: TestClient) -> None:
        """Test the login cookie authenticates later requests."""
        user_id = register(auth_client).json()["id"]
        login(auth_client)

        response = auth_client.get("/api/auth/session")

        assert response.status_code == 200
        assert response.json() == {"user_id": user_id}

    def test_session_from_header(self, auth_client: TestClient) -> None:
        """Test non-browser clients can authenticate with the session header."""
        user_id = register(auth_client).json()["id"]
        session_id = login(auth_client).json()["session_id"]
        auth_client.cookies.clear()

        response = auth_client.get("/api/auth/session", headers={"X-Session-Id": session_id})

        assert response.status_code == 200
        assert response.json() == {"user_id": user_id}

    def test_no_session(self, auth_client: TestClient) -> None:
        """Test a request without a session is 401 UNAUTHENTICATED."""
        response = auth_client.get("/api/auth/session")

        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHENTICATED"

    def test_logout_invalidates_session(self, auth_client: TestClient) -> None:
        """Test the session is unusable after logout."""
        register(auth_client)
        session_id = login(auth_client).json()["session_id"]

        response = auth_client.post("/api/auth/logout")

        assert response.status_code == 200
        assert "SESSION=" in response.headers["set-cookie"]

        response = auth_client.get("/api/auth/session", headers={"X-Session-Id": session_id})
        assert response.status_code == 401

    def test_logout_without_session(self, auth_client: TestClient) -> None:
        """Test logout is idempotent."""
        response = auth_client.post("/api/auth/logout")

        assert response.status_code == 200

    def test_session_store_outage(self, auth_client: TestClient, session_store) -> None:
        """Test a store outage is 503, not 401."""
        session_store.get = Mock(side_effect=StoreUnavailableError("Session store is unavailable"))

        response = auth_client.get("/api/auth/session", headers={"X-Session-Id": "some-token"})

        assert response.status_code == 503
        assert response.json()["error"] == "STORE_UNAVAILABLE"
