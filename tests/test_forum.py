"""
Tests for forum endpoints: visibility, posting rules and moderation.
"""

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from tenant_commons.core.config import settings
from tenant_commons.models.account import Account
from tenant_commons.models.forum import Category, Comment, Topic
from tenant_commons.schemas.forum import CommentCreate
from tenant_commons.services.forum_service import ForumService

FORUM = f"{settings.API_V1_PREFIX}/forum"
ADMIN = f"{settings.API_V1_PREFIX}/admin"


def test_anonymous_cannot_view_forum(client: TestClient) -> None:
    response = client.get(f"{FORUM}/topics")
    assert response.status_code == 401
    assert response.json()["reason"] == "not_authenticated"


def test_pending_member_sees_status_message(client: TestClient, pending_headers: dict) -> None:
    response = client.get(f"{FORUM}/topics", headers=pending_headers)
    assert response.status_code == 403
    data = response.json()
    assert data["reason"] == "not_approved"
    assert "awaiting" in data["detail"]


def test_rejected_member_is_told_so(client: TestClient, rejected_headers: dict) -> None:
    response = client.get(f"{FORUM}/categories", headers=rejected_headers)
    assert response.status_code == 403
    assert response.json()["reason"] == "not_approved"
    assert "not approved" in response.json()["detail"]


def test_signup_then_approval_opens_forum(
    client: TestClient, admin_headers: dict, login
) -> None:
    """A fresh registrant is pending until an admin approves them."""
    response = client.post(
        f"{settings.API_V1_PREFIX}/auth/register",
        json={"email": "newcomer@example.com", "password": "testpassword123"},
    )
    assert response.status_code == 201
    account = response.json()
    assert account["status"] == "pending"
    assert account["role"] == "user"

    headers = login("newcomer@example.com")
    assert client.get(f"{FORUM}/topics", headers=headers).status_code == 403

    approve = client.post(f"{ADMIN}/accounts/{account['user_id']}/approve", headers=admin_headers)
    assert approve.status_code == 200
    assert approve.json()["status"] == "approved"

    assert client.get(f"{FORUM}/topics", headers=headers).status_code == 200


def test_member_creates_topic(client: TestClient, member_headers: dict, category: Category) -> None:
    response = client.post(
        f"{FORUM}/topics",
        headers=member_headers,
        json={"category_id": category.id, "title": "  Broken lift  ", "body": "Out since Friday"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Broken lift"
    assert data["author_name"] == "Maria"
    assert data["is_hidden"] is False


def test_member_cannot_post_announcement(
    client: TestClient, member_headers: dict, announcements: Category, session: Session
) -> None:
    response = client.post(
        f"{FORUM}/topics",
        headers=member_headers,
        json={"category_id": announcements.id, "title": "Meeting", "body": "Tuesday 7pm"},
    )
    assert response.status_code == 403
    assert response.json()["reason"] == "wrong_category_restriction"
    assert session.exec(select(Topic)).all() == []


def test_admin_posts_announcement(client: TestClient, admin_headers: dict, announcements: Category) -> None:
    response = client.post(
        f"{FORUM}/topics",
        headers=admin_headers,
        json={"category_id": announcements.id, "title": "Meeting", "body": "Tuesday 7pm"},
    )
    assert response.status_code == 201


def test_topic_in_unknown_category(client: TestClient, member_headers: dict) -> None:
    response = client.post(
        f"{FORUM}/topics",
        headers=member_headers,
        json={"category_id": "missing", "title": "Hello", "body": "World"},
    )
    assert response.status_code == 404
    assert response.json()["reason"] == "resource_not_found"


def test_topic_requires_title_and_category(client: TestClient, member_headers: dict, category: Category) -> None:
    missing_category = client.post(f"{FORUM}/topics", headers=member_headers, json={"title": "x", "body": "y"})
    blank_title = client.post(
        f"{FORUM}/topics",
        headers=member_headers,
        json={"category_id": category.id, "title": "   ", "body": "y"},
    )
    assert missing_category.status_code == 422
    assert blank_title.status_code == 422


def test_comment_on_topic(client: TestClient, member_headers: dict, topic: Topic) -> None:
    response = client.post(
        f"{FORUM}/topics/{topic.id}/comments",
        headers=member_headers,
        json={"body": "Same on floor 4"},
    )
    assert response.status_code == 201

    detail = client.get(f"{FORUM}/topics/{topic.id}", headers=member_headers).json()
    assert [c["body"] for c in detail["comments"]] == ["Same on floor 4"]
    assert detail["category"]["id"] == topic.category_id


def test_comment_on_missing_topic(client: TestClient, member_headers: dict) -> None:
    response = client.post(f"{FORUM}/topics/nope/comments", headers=member_headers, json={"body": "hi"})
    assert response.status_code == 404


def test_hidden_topic_visible_only_to_admins(
    client: TestClient, member_headers: dict, admin_headers: dict, topic: Topic
) -> None:
    hide = client.post(f"{FORUM}/topics/{topic.id}/hide", headers=admin_headers)
    assert hide.status_code == 200
    assert hide.json()["is_hidden"] is True

    member_view = client.get(f"{FORUM}/topics", headers=member_headers).json()
    admin_view = client.get(f"{FORUM}/topics", headers=admin_headers).json()

    assert topic.id not in [t["id"] for t in member_view]
    assert [t for t in admin_view if t["id"] == topic.id][0]["is_hidden"] is True
    assert client.get(f"{FORUM}/topics/{topic.id}", headers=member_headers).status_code == 404


def test_members_cannot_comment_on_hidden_topic(
    client: TestClient, member_headers: dict, admin_headers: dict, topic: Topic
) -> None:
    client.post(f"{FORUM}/topics/{topic.id}/hide", headers=admin_headers)

    member = client.post(f"{FORUM}/topics/{topic.id}/comments", headers=member_headers, json={"body": "hi"})
    admin = client.post(f"{FORUM}/topics/{topic.id}/comments", headers=admin_headers, json={"body": "locked"})

    assert member.status_code == 404
    assert admin.status_code == 201


def test_hide_twice_is_a_noop(client: TestClient, admin_headers: dict, topic: Topic) -> None:
    first = client.post(f"{FORUM}/topics/{topic.id}/hide", headers=admin_headers)
    second = client.post(f"{FORUM}/topics/{topic.id}/hide", headers=admin_headers)
    assert first.status_code == second.status_code == 200
    assert first.json()["updated_at"] == second.json()["updated_at"]


def test_member_cannot_moderate(client: TestClient, member_headers: dict, topic: Topic, session: Session) -> None:
    hide = client.post(f"{FORUM}/topics/{topic.id}/hide", headers=member_headers)
    delete = client.delete(f"{FORUM}/topics/{topic.id}", headers=member_headers)

    assert hide.status_code == 403
    assert delete.status_code == 403
    assert hide.json()["reason"] == "not_admin"
    session.refresh(topic)
    assert topic.is_hidden is False


def test_hidden_comments_filtered_for_members(
    client: TestClient, member_headers: dict, admin_headers: dict, topic: Topic
) -> None:
    kept = client.post(f"{FORUM}/topics/{topic.id}/comments", headers=member_headers, json={"body": "useful"})
    spam = client.post(f"{FORUM}/topics/{topic.id}/comments", headers=member_headers, json={"body": "spam"})
    client.post(f"{FORUM}/comments/{spam.json()['id']}/hide", headers=admin_headers)

    member_view = client.get(f"{FORUM}/topics/{topic.id}/comments", headers=member_headers).json()
    admin_view = client.get(f"{FORUM}/topics/{topic.id}/comments", headers=admin_headers).json()

    assert [c["id"] for c in member_view] == [kept.json()["id"]]
    assert len(admin_view) == 2


def test_delete_topic_removes_comments(
    client: TestClient, member_headers: dict, admin_headers: dict, topic: Topic, session: Session
) -> None:
    topic_id = topic.id
    for body in ("first", "second"):
        client.post(f"{FORUM}/topics/{topic_id}/comments", headers=member_headers, json={"body": body})

    response = client.delete(f"{FORUM}/topics/{topic_id}", headers=admin_headers)
    assert response.status_code == 204

    assert client.get(f"{FORUM}/topics/{topic_id}/comments", headers=admin_headers).status_code == 404
    assert session.exec(select(Comment).where(Comment.topic_id == topic_id)).all() == []
    assert session.get(Topic, topic_id) is None


def test_delete_comment(client: TestClient, member_headers: dict, admin_headers: dict, topic: Topic) -> None:
    comment = client.post(f"{FORUM}/topics/{topic.id}/comments", headers=member_headers, json={"body": "x"}).json()

    assert client.delete(f"{FORUM}/comments/{comment['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"{FORUM}/topics/{topic.id}/comments", headers=member_headers).json() == []


def test_unhide_is_admin_only(
    client: TestClient, member_headers: dict, admin_headers: dict, topic: Topic
) -> None:
    client.post(f"{FORUM}/topics/{topic.id}/hide", headers=admin_headers)

    assert client.post(f"{FORUM}/topics/{topic.id}/unhide", headers=member_headers).status_code == 403
    response = client.post(f"{FORUM}/topics/{topic.id}/unhide", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_hidden"] is False


def test_posting_never_unhides(session: Session, admin: Account, member: Account, topic: Topic) -> None:
    """Only the explicit unhide path clears the hidden flag."""
    service = ForumService(session)
    service.hide_topic(admin, topic.id)

    service.create_comment(admin, topic.id, CommentCreate(body="still hidden"))
    service.hide_topic(admin, topic.id)

    assert session.get(Topic, topic.id).is_hidden is True


def test_author_name_falls_back(session: Session, make_account, topic: Topic) -> None:
    nameless = make_account("nameless@example.com")
    names = ForumService(session).author_names([nameless.user_id, topic.created_by])

    assert names[nameless.user_id] == settings.ANONYMOUS_DISPLAY_NAME
    assert names[topic.created_by] == "Maria"
