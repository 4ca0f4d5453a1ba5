"""
Identity model backing the built-in identity provider.
An identity is only a credential; forum standing lives on ``Account``.
"""

from datetime import datetime
from uuid import uuid4

from sqlmodel import Field, SQLModel

from tenant_commons.models.account import utcnow


class Identity(SQLModel, table=True):
    """
    Login credential for one person.

    Attributes:
        id: Opaque identifier, stable for the lifetime of the identity
        email: Unique email address (used for login)
        hashed_password: Password hash (pbkdf2_sha256 by default)
        is_active: Whether the credential may still sign in
        created_at: Timestamp of registration
    """

    __tablename__ = "identities"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    hashed_password: str
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
