"""
Access policy engine.

Pure decision logic: given the actor's account (or None for anonymous), an
action and the target resource, return whether the action is allowed and, if
not, why. Nothing here touches the database; callers load the account and the
resource and pass them in. Every service call runs ``enforce`` before it
writes, so the rules below are the single source of truth for who may do what.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, TypeVar

from tenant_commons.core.errors import AccessDenied, DenialReason
from tenant_commons.core.logging import get_logger
from tenant_commons.models.account import Account, AccountStatus
from tenant_commons.models.forum import Category, Topic

logger = get_logger(__name__)

T = TypeVar("T")


class Action(str, Enum):
    """Every action the policy knows how to judge."""

    VIEW_PUBLIC = "view_public"
    SUBMIT_INCIDENT = "submit_incident"
    VIEW_FORUM = "view_forum"
    VIEW_TOPIC = "view_topic"
    CREATE_TOPIC = "create_topic"
    CREATE_COMMENT = "create_comment"
    MODERATE_TOPIC = "moderate_topic"
    MODERATE_COMMENT = "moderate_comment"
    MODERATE_ACCOUNT = "moderate_account"
    MANAGE_CATEGORY = "manage_category"
    MANAGE_SUBMISSIONS = "manage_submissions"
    READ_ACCOUNT = "read_account"


PUBLIC_ACTIONS = frozenset({Action.VIEW_PUBLIC, Action.SUBMIT_INCIDENT})

# Admin-only actions whose resource is optional (listing, creating).
ADMIN_ACTIONS = frozenset({
    Action.MODERATE_TOPIC,
    Action.MODERATE_COMMENT,
    Action.MODERATE_ACCOUNT,
    Action.MANAGE_CATEGORY,
    Action.MANAGE_SUBMISSIONS,
})


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy check."""

    allowed: bool
    reason: Optional[DenialReason] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> "Decision":
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed


class _Missing:
    """Marker for "the caller looked the resource up and found nothing"."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def can_see_hidden(actor: Optional[Account]) -> bool:
    """Only admins see hidden topics and comments."""
    return actor is not None and actor.is_admin


def filter_visible(actor: Optional[Account], items: Iterable[T]) -> List[T]:
    """Drop hidden items unless the actor is allowed to see them."""
    if can_see_hidden(actor):
        return list(items)
    return [item for item in items if not getattr(item, "is_hidden", False)]


def _is_visible_to(actor: Account, item: Any) -> bool:
    return not item.is_hidden or can_see_hidden(actor)


def decide(actor: Optional[Account], action: Action, resource: Any = None) -> Decision:
    """
    Judge one action.

    Args:
        actor: The current account, or None for an anonymous request
        action: What the actor wants to do
        resource: The target. ``MISSING`` means the caller looked it up and it
            does not exist; None means the action has no single target
            (listing, creating a category).

    Returns:
        Decision, denied with the first failing rule's reason
    """
    if action in PUBLIC_ACTIONS:
        return Decision.allow()

    if actor is None:
        return Decision.deny(DenialReason.NOT_AUTHENTICATED)

    if action in ADMIN_ACTIONS:
        # Authorization first so non-admins learn nothing about which ids exist.
        if not actor.is_admin:
            return Decision.deny(DenialReason.NOT_ADMIN)
        if resource is MISSING:
            return Decision.deny(DenialReason.RESOURCE_NOT_FOUND)
        return Decision.allow()

    if action == Action.READ_ACCOUNT:
        exists = resource is not None and resource is not MISSING
        if not actor.is_admin:
            # Non-owners learn nothing about which ids exist.
            if exists and resource.user_id == actor.user_id:
                return Decision.allow()
            return Decision.deny(DenialReason.NOT_ADMIN)
        if not exists:
            return Decision.deny(DenialReason.RESOURCE_NOT_FOUND)
        return Decision.allow()

    # Everything below is forum access, which requires approval.
    if not actor.is_approved:
        return Decision.deny(DenialReason.NOT_APPROVED)

    if action == Action.VIEW_FORUM:
        return Decision.allow()

    if action in (Action.VIEW_TOPIC, Action.CREATE_COMMENT):
        if not isinstance(resource, Topic) or not _is_visible_to(actor, resource):
            return Decision.deny(DenialReason.RESOURCE_NOT_FOUND)
        return Decision.allow()

    if action == Action.CREATE_TOPIC:
        if not isinstance(resource, Category):
            return Decision.deny(DenialReason.RESOURCE_NOT_FOUND)
        if resource.is_announcement and not actor.is_admin:
            return Decision.deny(DenialReason.WRONG_CATEGORY_RESTRICTION)
        return Decision.allow()

    raise ValueError(f"No policy rule for action {action!r}")


def _denial_message(actor: Optional[Account], reason: DenialReason) -> Optional[str]:
    if reason != DenialReason.NOT_APPROVED or actor is None:
        return None
    if actor.status == AccountStatus.REJECTED:
        return "Your account request was not approved"
    return "Your account is awaiting admin approval"


def enforce(actor: Optional[Account], action: Action, resource: Any = None) -> None:
    """
    Raise ``AccessDenied`` unless ``decide`` allows the action.

    Raises:
        AccessDenied: carrying the denial reason and a user-facing message
    """
    decision = decide(actor, action, resource)
    if decision.allowed:
        return
    reason = decision.reason or DenialReason.NOT_ADMIN
    actor_id = actor.user_id if actor is not None else "anonymous"
    logger.warning(f"Denied {action.value} for {actor_id}: {reason.value}")
    raise AccessDenied(reason, _denial_message(actor, reason))


def enforce_on(actor: Optional[Account], action: Action, resource: Optional[T]) -> T:
    """
    ``enforce`` against a looked-up resource, where None means it was not found.

    Returns:
        The resource, once the actor may act on it
    """
    enforce(actor, action, MISSING if resource is None else resource)
    if resource is None:
        raise AccessDenied(DenialReason.RESOURCE_NOT_FOUND)
    return resource
