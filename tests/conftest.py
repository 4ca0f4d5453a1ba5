"""
Pytest configuration and fixtures.
Provides test database, client, and common test utilities.
"""

import os
import tempfile
from typing import Callable, Dict, Generator

# Settings are read at import time, so the environment must be ready first.
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DISABLE_BOOTSTRAP_USERS", "true")
os.environ.setdefault("FILE_STORAGE_PATH", tempfile.mkdtemp(prefix="tenant-commons-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from tenant_commons.core.config import settings  # noqa: E402
from tenant_commons.db.session import get_session  # noqa: E402
from tenant_commons.main import app  # noqa: E402
from tenant_commons.models.account import Account, AccountRole, AccountStatus, utcnow  # noqa: E402
from tenant_commons.models.forum import Category, Topic  # noqa: E402
from tenant_commons.services.evidence_storage import EvidenceStorage, get_evidence_storage  # noqa: E402
from tenant_commons.services.identity_service import IdentityService  # noqa: E402

PASSWORD = "testpassword123"


@pytest.fixture(name="session")
def session_fixture() -> Generator[Session, None, None]:
    """
    Create a test database session.
    Uses an in-memory SQLite database for fast tests.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        yield session


@pytest.fixture(name="storage")
def storage_fixture(tmp_path) -> EvidenceStorage:
    return EvidenceStorage(base_path=tmp_path)


@pytest.fixture(name="client")
def client_fixture(session: Session, storage: EvidenceStorage) -> Generator[TestClient, None, None]:
    """
    Create a test client with dependency overrides.
    """

    def get_session_override() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_evidence_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(name="make_account")
def make_account_fixture(session: Session) -> Callable[..., Account]:
    """
    Factory for an identity plus its account in a given standing.
    """

    def _make(
        email: str,
        status: AccountStatus = AccountStatus.PENDING,
        role: AccountRole = AccountRole.USER,
        display_name: str | None = None,
    ) -> Account:
        identity = IdentityService.create(session, email=email, password=PASSWORD)
        account = Account(
            user_id=identity.id,
            status=status,
            role=role,
            display_name=display_name,
            approved_at=utcnow() if status == AccountStatus.APPROVED else None,
        )
        session.add(account)
        session.commit()
        session.refresh(account)
        return account

    return _make


@pytest.fixture(name="pending_account")
def pending_account_fixture(make_account) -> Account:
    return make_account("pending@example.com")


@pytest.fixture(name="member")
def member_fixture(make_account) -> Account:
    """An approved, ordinary member."""
    return make_account("member@example.com", status=AccountStatus.APPROVED, display_name="Maria")


@pytest.fixture(name="rejected_account")
def rejected_account_fixture(make_account) -> Account:
    return make_account("rejected@example.com", status=AccountStatus.REJECTED)


@pytest.fixture(name="admin")
def admin_fixture(make_account) -> Account:
    return make_account(
        "admin@example.com",
        status=AccountStatus.APPROVED,
        role=AccountRole.ADMIN,
        display_name="Organizer",
    )


def _login(client: TestClient, email: str) -> Dict[str, str]:
    """Log in and return the Authorization header for the identity."""
    response = client.post(
        f"{settings.API_V1_PREFIX}/auth/login",
        data={"username": email, "password": PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture(name="pending_headers")
def pending_headers_fixture(client: TestClient, pending_account: Account) -> Dict[str, str]:
    return _login(client, "pending@example.com")


@pytest.fixture(name="member_headers")
def member_headers_fixture(client: TestClient, member: Account) -> Dict[str, str]:
    return _login(client, "member@example.com")


@pytest.fixture(name="rejected_headers")
def rejected_headers_fixture(client: TestClient, rejected_account: Account) -> Dict[str, str]:
    return _login(client, "rejected@example.com")


@pytest.fixture(name="admin_headers")
def admin_headers_fixture(client: TestClient, admin: Account) -> Dict[str, str]:
    return _login(client, "admin@example.com")


@pytest.fixture(name="category")
def category_fixture(session: Session) -> Category:
    category = Category(name="General", description="Anything about the building")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture(name="announcements")
def announcements_fixture(session: Session) -> Category:
    category = Category(name="Announcements", is_announcement=True)
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture(name="topic")
def topic_fixture(session: Session, category: Category, member: Account) -> Topic:
    """A visible topic opened by the member."""
    topic = Topic(
        title="Heat outage on floor 3",
        body="No heat since Monday.",
        category_id=category.id,
        created_by=member.user_id,
    )
    session.add(topic)
    session.commit()
    session.refresh(topic)
    return topic


@pytest.fixture(name="login")
def login_fixture(client: TestClient) -> Callable[[str], Dict[str, str]]:
    """Log in any identity created with the shared test password."""
    return lambda email: _login(client, email)
