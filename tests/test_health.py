"""
Tests for health check and public site endpoints.
"""

from datetime import timedelta

from fastapi.testclient import TestClient

from tenant_commons.core.config import settings
from tenant_commons.core.security import create_access_token
from tenant_commons.models.account import Account
from tenant_commons.models.submission import IssueType


def test_health_check(client: TestClient) -> None:
    """Test basic health check."""
    response = client.get(f"{settings.API_V1_PREFIX}/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == settings.PROJECT_NAME
    assert data["version"] == settings.VERSION


def test_database_health_check(client: TestClient) -> None:
    """Test database health check."""
    response = client.get(f"{settings.API_V1_PREFIX}/health/db")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"


def test_site_info_is_public(client: TestClient) -> None:
    response = client.get(f"{settings.API_V1_PREFIX}/site")
    assert response.status_code == 200
    data = response.json()
    assert data["issue_types"] == [issue.value for issue in IssueType]
    assert "application/pdf" in data["accepted_file_types"]
    assert data["max_file_size"] == settings.MAX_EVIDENCE_FILE_SIZE


def test_site_info_ignores_expired_token(client: TestClient, member: Account) -> None:
    """A stale session never locks anyone out of public pages."""
    expired = create_access_token(member.user_id, expires_delta=timedelta(minutes=-5))
    response = client.get(
        f"{settings.API_V1_PREFIX}/site",
        headers={"Authorization": f"Bearer {expired}"},
    )
    assert response.status_code == 200


def test_site_info_ignores_garbage_token(client: TestClient) -> None:
    response = client.get(f"{settings.API_V1_PREFIX}/site", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 200


def test_forum_still_rejects_expired_token(client: TestClient, member: Account) -> None:
    expired = create_access_token(member.user_id, expires_delta=timedelta(minutes=-5))
    response = client.get(
        f"{settings.API_V1_PREFIX}/forum/topics",
        headers={"Authorization": f"Bearer {expired}"},
    )
    assert response.status_code == 401
