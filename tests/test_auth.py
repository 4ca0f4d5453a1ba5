"""
Tests for authentication endpoints.
"""

from fastapi.testclient import TestClient

from tenant_commons.core.config import settings
from tenant_commons.core.security import create_access_token
from tenant_commons.models.account import Account
from tenant_commons.services.identity_service import IdentityService

AUTH = f"{settings.API_V1_PREFIX}/auth"


def test_register_creates_pending_account(client: TestClient) -> None:
    """Test registration starts a pending membership request."""
    response = client.post(
        f"{AUTH}/register",
        json={
            "email": "NewUser@Example.com",
            "password": "newpassword123",
            "display_name": "New Neighbour",
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["role"] == "user"
    assert data["display_name"] == "New Neighbour"
    assert data["approved_at"] is None
    assert "hashed_password" not in data


def test_register_duplicate_email(client: TestClient, member: Account) -> None:
    """Test that duplicate email registration fails, case-insensitively."""
    response = client.post(
        f"{AUTH}/register",
        json={"email": "MEMBER@example.com", "password": "password123"},
    )
    assert response.status_code == 400


def test_register_short_password(client: TestClient) -> None:
    response = client.post(f"{AUTH}/register", json={"email": "short@example.com", "password": "abc"})
    assert response.status_code == 422


def test_login_success(client: TestClient, member: Account) -> None:
    """Test successful login."""
    response = client.post(
        f"{AUTH}/login",
        data={"username": "member@example.com", "password": "testpassword123"},
    )
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"


def test_login_wrong_password(client: TestClient, member: Account) -> None:
    """Test login with wrong password."""
    response = client.post(
        f"{AUTH}/login",
        data={"username": "member@example.com", "password": "wrongpassword"},
    )
    assert response.status_code == 401


def test_login_nonexistent_user(client: TestClient) -> None:
    """Test login with non-existent user."""
    response = client.post(
        f"{AUTH}/login",
        data={"username": "nobody@example.com", "password": "password123"},
    )
    assert response.status_code == 401


def test_invalid_token_is_rejected(client: TestClient) -> None:
    response = client.get(
        f"{settings.API_V1_PREFIX}/accounts/me",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_token_for_unknown_identity(client: TestClient) -> None:
    token = create_access_token(subject="ghost")
    response = client.get(
        f"{settings.API_V1_PREFIX}/accounts/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


def test_register_concurrent_duplicate(client: TestClient, member: Account, monkeypatch) -> None:
    """An email taken between the lookup and the insert is reported, not a 500."""
    monkeypatch.setattr(IdentityService, "get_by_email", staticmethod(lambda session, email: None))

    response = client.post(
        f"{AUTH}/register",
        json={"email": "member@example.com", "password": "password123"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"
