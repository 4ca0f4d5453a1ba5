"""
Community forum routes.
Only approved accounts get past the policy; admins also see hidden content.
"""

from typing import List, Optional

from fastapi import APIRouter, Response, status

from tenant_commons.api.deps import ActorDep, SessionDep
from tenant_commons.models.forum import Topic
from tenant_commons.schemas.forum import (
    CategoryResponse,
    CommentCreate,
    CommentResponse,
    TopicCreate,
    TopicDetailResponse,
    TopicResponse,
)
from tenant_commons.services.forum_service import ForumService

router = APIRouter(prefix="/forum", tags=["forum"])


def _topic_response(service: ForumService, topic: Topic) -> TopicResponse:
    names = service.author_names([topic.created_by])
    return TopicResponse.build(topic, names[topic.created_by])


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(actor: ActorDep, session: SessionDep) -> List[CategoryResponse]:
    service = ForumService(session)
    return [CategoryResponse.model_validate(c) for c in service.list_categories(actor)]


@router.get("/topics", response_model=List[TopicResponse])
def list_topics(
    actor: ActorDep,
    session: SessionDep,
    category_id: Optional[str] = None,
) -> List[TopicResponse]:
    """List topics, optionally within one category."""
    service = ForumService(session)
    topics = service.list_topics(actor, category_id=category_id)
    names = service.author_names(t.created_by for t in topics)
    return [TopicResponse.build(t, names[t.created_by]) for t in topics]


@router.post("/topics", response_model=TopicResponse, status_code=status.HTTP_201_CREATED)
def create_topic(topic_in: TopicCreate, actor: ActorDep, session: SessionDep) -> TopicResponse:
    service = ForumService(session)
    topic = service.create_topic(actor, topic_in)
    return _topic_response(service, topic)


@router.get("/topics/{topic_id}", response_model=TopicDetailResponse)
def get_topic(topic_id: str, actor: ActorDep, session: SessionDep) -> TopicDetailResponse:
    """Topic with its category and the comments visible to the caller."""
    service = ForumService(session)
    topic = service.get_topic(actor, topic_id)
    comments = service.list_comments(actor, topic_id)
    category = service.get_category(topic.category_id)
    names = service.author_names([topic.created_by, *(c.created_by for c in comments)])

    base = TopicResponse.build(topic, names[topic.created_by])
    return TopicDetailResponse(
        **base.model_dump(),
        category=CategoryResponse.model_validate(category),
        comments=[CommentResponse.build(c, names[c.created_by]) for c in comments],
    )


@router.post("/topics/{topic_id}/hide", response_model=TopicResponse)
def hide_topic(topic_id: str, actor: ActorDep, session: SessionDep) -> TopicResponse:
    service = ForumService(session)
    return _topic_response(service, service.hide_topic(actor, topic_id))


@router.post("/topics/{topic_id}/unhide", response_model=TopicResponse)
def unhide_topic(topic_id: str, actor: ActorDep, session: SessionDep) -> TopicResponse:
    service = ForumService(session)
    return _topic_response(service, service.unhide_topic(actor, topic_id))


@router.delete("/topics/{topic_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_topic(topic_id: str, actor: ActorDep, session: SessionDep) -> Response:
    """Delete a topic and every comment on it."""
    ForumService(session).delete_topic(actor, topic_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/topics/{topic_id}/comments", response_model=List[CommentResponse])
def list_comments(topic_id: str, actor: ActorDep, session: SessionDep) -> List[CommentResponse]:
    service = ForumService(session)
    comments = service.list_comments(actor, topic_id)
    names = service.author_names(c.created_by for c in comments)
    return [CommentResponse.build(c, names[c.created_by]) for c in comments]


@router.post(
    "/topics/{topic_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    topic_id: str,
    comment_in: CommentCreate,
    actor: ActorDep,
    session: SessionDep,
) -> CommentResponse:
    service = ForumService(session)
    comment = service.create_comment(actor, topic_id, comment_in)
    names = service.author_names([comment.created_by])
    return CommentResponse.build(comment, names[comment.created_by])


@router.post("/comments/{comment_id}/hide", response_model=CommentResponse)
def hide_comment(comment_id: str, actor: ActorDep, session: SessionDep) -> CommentResponse:
    service = ForumService(session)
    comment = service.hide_comment(actor, comment_id)
    return CommentResponse.build(comment, service.author_names([comment.created_by])[comment.created_by])


@router.post("/comments/{comment_id}/unhide", response_model=CommentResponse)
def unhide_comment(comment_id: str, actor: ActorDep, session: SessionDep) -> CommentResponse:
    service = ForumService(session)
    comment = service.unhide_comment(actor, comment_id)
    return CommentResponse.build(comment, service.author_names([comment.created_by])[comment.created_by])


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_comment(comment_id: str, actor: ActorDep, session: SessionDep) -> Response:
    ForumService(session).delete_comment(actor, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
