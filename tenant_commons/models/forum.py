"""
Forum content models: categories, topics and comments.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlmodel import Field, SQLModel

from tenant_commons.models.account import utcnow


class Category(SQLModel, table=True):
    """
    Discussion area. Announcement categories only accept admin-authored topics.
    """

    __tablename__ = "forum_categories"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(unique=True, index=True, max_length=120)
    description: Optional[str] = Field(default=None, max_length=1000)
    is_announcement: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)


class Topic(SQLModel, table=True):
    """
    A thread opened by an approved account inside exactly one category.
    Deleting a topic deletes its comments.
    """

    __tablename__ = "forum_topics"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str = Field(max_length=200)
    body: str
    category_id: str = Field(foreign_key="forum_categories.id", index=True)
    created_by: str = Field(foreign_key="accounts.user_id", index=True)
    is_hidden: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Comment(SQLModel, table=True):
    """A reply on a topic. Leaf entity, nothing cascades from it."""

    __tablename__ = "forum_comments"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    body: str
    topic_id: str = Field(foreign_key="forum_topics.id", index=True)
    created_by: str = Field(foreign_key="accounts.user_id", index=True)
    is_hidden: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
