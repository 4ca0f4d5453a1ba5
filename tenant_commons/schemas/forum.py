"""
Forum schemas for categories, topics and comments.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, StringConstraints

from tenant_commons.models.forum import Comment, Topic

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CategoryCreate(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
    description: Optional[str] = None
    is_announcement: bool = False


class CategoryUpdate(BaseModel):
    """Partial update; omitted fields are left alone."""

    name: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]] = None
    description: Optional[str] = None
    is_announcement: Optional[bool] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_announcement: bool

    model_config = {"from_attributes": True}


class TopicCreate(BaseModel):
    """A category, a title and a message are all required."""

    category_id: RequiredText
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    body: RequiredText


class CommentCreate(BaseModel):
    body: RequiredText


class CommentResponse(BaseModel):
    id: str
    body: str
    topic_id: str
    created_by: str
    author_name: str
    is_hidden: bool
    created_at: datetime

    @classmethod
    def build(cls, comment: Comment, author_name: str) -> "CommentResponse":
        return cls(
            id=comment.id,
            body=comment.body,
            topic_id=comment.topic_id,
            created_by=comment.created_by,
            author_name=author_name,
            is_hidden=comment.is_hidden,
            created_at=comment.created_at,
        )


class TopicResponse(BaseModel):
    id: str
    title: str
    body: str
    category_id: str
    created_by: str
    author_name: str
    is_hidden: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def build(cls, topic: Topic, author_name: str) -> "TopicResponse":
        return cls(
            id=topic.id,
            title=topic.title,
            body=topic.body,
            category_id=topic.category_id,
            created_by=topic.created_by,
            author_name=author_name,
            is_hidden=topic.is_hidden,
            created_at=topic.created_at,
            updated_at=topic.updated_at,
        )


class TopicDetailResponse(TopicResponse):
    """Topic with the comments the viewer is allowed to see."""

    category: CategoryResponse
    comments: List[CommentResponse] = []
