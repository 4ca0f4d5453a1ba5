"""
Account model carrying forum standing.
Implements the pending/approved/rejected status axis and the user/admin role axis.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


class AccountStatus(str, Enum):
    """Moderation status of an account."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AccountRole(str, Enum):
    """Account role enumeration for RBAC."""

    ADMIN = "admin"
    USER = "user"


class Account(SQLModel, table=True):
    """
    One account per authenticated identity, created on first sight.

    Attributes:
        user_id: Identity id supplied by the identity provider
        status: pending until an admin approves or rejects it
        role: user or admin; admin always implies approved
        display_name: Optional public name; None renders as a generic label
        created_at: Set once at creation
        approved_at: Set on the first approval or promotion, never moved after
        updated_at: Timestamp of the last status/role/profile change
    """

    __tablename__ = "accounts"  # type: ignore

    user_id: str = Field(primary_key=True, foreign_key="identities.id", max_length=64)
    status: AccountStatus = Field(default=AccountStatus.PENDING, index=True)
    role: AccountRole = Field(default=AccountRole.USER)
    display_name: Optional[str] = Field(default=None, max_length=120)
    created_at: datetime = Field(default_factory=utcnow)
    approved_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_approved(self) -> bool:
        return self.status == AccountStatus.APPROVED

    @property
    def is_admin(self) -> bool:
        # A role/status mismatch fails closed.
        return self.role == AccountRole.ADMIN and self.status == AccountStatus.APPROVED
