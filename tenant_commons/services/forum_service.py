"""
Forum service for categories, topics and comments.
Every read and write goes through the access policy with the caller's
account passed in explicitly.
"""

from typing import Dict, Iterable, List, Optional, cast

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from tenant_commons.core.config import settings
from tenant_commons.core.errors import ConflictError
from tenant_commons.core.logging import get_logger
from tenant_commons.models.account import Account, utcnow
from tenant_commons.models.forum import Category, Comment, Topic
from tenant_commons.schemas.forum import CategoryCreate, CategoryUpdate, CommentCreate, TopicCreate
from tenant_commons.services.access_policy import Action, can_see_hidden, enforce, enforce_on

logger = get_logger(__name__)


class ForumService:
    """
    Service for the community forum.
    Hidden content is filtered in the queries themselves, not left to callers.
    """

    def __init__(self, session: Session):
        self.session = session

    def _commit(self) -> None:
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def _commit_category(self, name: str) -> None:
        # A concurrent writer can take the name between the check and the insert.
        try:
            self._commit()
        except IntegrityError as e:
            raise ConflictError(f"A category named '{name}' already exists") from e

    # ========== Categories ==========

    def list_categories(self, actor: Optional[Account]) -> List[Category]:
        """List categories by name. Approved members only."""
        enforce(actor, Action.VIEW_FORUM)
        statement = select(Category).order_by(Category.name)
        return list(self.session.exec(statement).all())

    def _ensure_unique_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        statement = select(Category).where(Category.name == name)
        existing = self.session.exec(statement).first()
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"A category named '{name}' already exists")

    def create_category(self, actor: Optional[Account], data: CategoryCreate) -> Category:
        """Create a category. Admin only."""
        enforce(actor, Action.MANAGE_CATEGORY)
        self._ensure_unique_name(data.name)

        category = Category(
            name=data.name,
            description=data.description,
            is_announcement=data.is_announcement,
        )
        self.session.add(category)
        self._commit_category(category.name)
        self.session.refresh(category)
        logger.info(f"Category '{category.name}' created (announcement={category.is_announcement})")
        return category

    def update_category(self, actor: Optional[Account], category_id: str, data: CategoryUpdate) -> Category:
        """Apply a partial update to a category. Admin only, last writer wins."""
        category = enforce_on(actor, Action.MANAGE_CATEGORY, self.session.get(Category, category_id))

        changes = data.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)
        if "is_announcement" in changes and changes["is_announcement"] is None:
            changes.pop("is_announcement")
        if "name" in changes:
            self._ensure_unique_name(changes["name"], exclude_id=category.id)

        for key, value in changes.items():
            setattr(category, key, value)
        self.session.add(category)
        self._commit_category(category.name)
        self.session.refresh(category)
        logger.info(f"Category {category.id} updated: {sorted(changes)}")
        return category

    # ========== Topics ==========

    def list_topics(self, actor: Optional[Account], category_id: Optional[str] = None) -> List[Topic]:
        """
        List topics, newest first.

        Hidden topics are only returned to admins, who see them flagged.
        """
        enforce(actor, Action.VIEW_FORUM)
        statement = select(Topic).order_by(col(Topic.created_at).desc())
        if category_id is not None:
            statement = statement.where(Topic.category_id == category_id)
        if not can_see_hidden(actor):
            statement = statement.where(col(Topic.is_hidden).is_(False))
        return list(self.session.exec(statement).all())

    def get_topic(self, actor: Optional[Account], topic_id: str) -> Topic:
        """
        Fetch one topic. A hidden topic looks nonexistent to non-admins.
        """
        enforce(actor, Action.VIEW_FORUM)
        return enforce_on(actor, Action.VIEW_TOPIC, self.session.get(Topic, topic_id))

    def get_category(self, category_id: str) -> Optional[Category]:
        return self.session.get(Category, category_id)

    def create_topic(self, actor: Optional[Account], data: TopicCreate) -> Topic:
        """
        Open a topic in a category.

        Announcement categories accept topics from admins only.
        """
        enforce(actor, Action.VIEW_FORUM)
        enforce_on(actor, Action.CREATE_TOPIC, self.session.get(Category, data.category_id))
        author = cast(Account, actor)

        topic = Topic(
            title=data.title,
            body=data.body,
            category_id=data.category_id,
            created_by=author.user_id,
        )
        self.session.add(topic)
        self._commit()
        self.session.refresh(topic)
        logger.info(f"Topic {topic.id} created by {author.user_id} in category {data.category_id}")
        return topic

    def _moderated_topic(self, actor: Optional[Account], topic_id: str) -> Topic:
        return enforce_on(actor, Action.MODERATE_TOPIC, self.session.get(Topic, topic_id))

    def _set_topic_hidden(self, actor: Optional[Account], topic_id: str, hidden: bool) -> Topic:
        topic = self._moderated_topic(actor, topic_id)
        if topic.is_hidden == hidden:
            return topic
        topic.is_hidden = hidden
        topic.updated_at = utcnow()
        self.session.add(topic)
        self._commit()
        self.session.refresh(topic)
        logger.info(f"Topic {topic_id} {'hidden' if hidden else 'unhidden'}")
        return topic

    def hide_topic(self, actor: Optional[Account], topic_id: str) -> Topic:
        """Hide a topic from members. Hiding twice is a no-op."""
        return self._set_topic_hidden(actor, topic_id, True)

    def unhide_topic(self, actor: Optional[Account], topic_id: str) -> Topic:
        """Make a hidden topic visible to members again. Admin only."""
        return self._set_topic_hidden(actor, topic_id, False)

    def delete_topic(self, actor: Optional[Account], topic_id: str) -> int:
        """
        Delete a topic together with all of its comments.

        Both deletes run in one transaction.

        Returns:
            Number of comments removed with the topic
        """
        topic = self._moderated_topic(actor, topic_id)
        comments = self.session.exec(select(Comment).where(Comment.topic_id == topic_id)).all()
        comment_count = len(comments)
        for comment in comments:
            self.session.delete(comment)
        # Children go first so the FK never points at a missing topic.
        self.session.flush()
        self.session.delete(topic)
        self._commit()
        logger.info(f"Topic {topic_id} deleted with {comment_count} comments")
        return comment_count

    # ========== Comments ==========

    def list_comments(self, actor: Optional[Account], topic_id: str) -> List[Comment]:
        """
        List a topic's comments, oldest first.

        Resolving the topic first means comments of a deleted or hidden
        topic are unreachable for members.
        """
        self.get_topic(actor, topic_id)
        statement = (
            select(Comment)
            .where(Comment.topic_id == topic_id)
            .order_by(col(Comment.created_at))
        )
        if not can_see_hidden(actor):
            statement = statement.where(col(Comment.is_hidden).is_(False))
        return list(self.session.exec(statement).all())

    def create_comment(self, actor: Optional[Account], topic_id: str, data: CommentCreate) -> Comment:
        """
        Reply to a topic.

        Members cannot reply to hidden topics; admins can.
        """
        enforce(actor, Action.VIEW_FORUM)
        enforce_on(actor, Action.CREATE_COMMENT, self.session.get(Topic, topic_id))
        author = cast(Account, actor)

        comment = Comment(body=data.body, topic_id=topic_id, created_by=author.user_id)
        self.session.add(comment)
        self._commit()
        self.session.refresh(comment)
        logger.info(f"Comment {comment.id} added to topic {topic_id} by {author.user_id}")
        return comment

    def _moderated_comment(self, actor: Optional[Account], comment_id: str) -> Comment:
        return enforce_on(actor, Action.MODERATE_COMMENT, self.session.get(Comment, comment_id))

    def _set_comment_hidden(self, actor: Optional[Account], comment_id: str, hidden: bool) -> Comment:
        comment = self._moderated_comment(actor, comment_id)
        if comment.is_hidden == hidden:
            return comment
        comment.is_hidden = hidden
        self.session.add(comment)
        self._commit()
        self.session.refresh(comment)
        logger.info(f"Comment {comment_id} {'hidden' if hidden else 'unhidden'}")
        return comment

    def hide_comment(self, actor: Optional[Account], comment_id: str) -> Comment:
        """Hide a comment from members. Hiding twice is a no-op."""
        return self._set_comment_hidden(actor, comment_id, True)

    def unhide_comment(self, actor: Optional[Account], comment_id: str) -> Comment:
        """Make a hidden comment visible again. Admin only."""
        return self._set_comment_hidden(actor, comment_id, False)

    def delete_comment(self, actor: Optional[Account], comment_id: str) -> None:
        """Delete a single comment."""
        comment = self._moderated_comment(actor, comment_id)
        self.session.delete(comment)
        self._commit()
        logger.info(f"Comment {comment_id} deleted")

    # ========== Display ==========

    def author_names(self, user_ids: Iterable[str]) -> Dict[str, str]:
        """
        Map account ids to the label shown next to their posts.
        Accounts without a display name get the generic label.
        """
        ids = set(user_ids)
        names = {user_id: settings.ANONYMOUS_DISPLAY_NAME for user_id in ids}
        if not ids:
            return names
        statement = select(Account).where(col(Account.user_id).in_(ids))
        for account in self.session.exec(statement).all():
            if account.display_name:
                names[account.user_id] = account.display_name
        return names
