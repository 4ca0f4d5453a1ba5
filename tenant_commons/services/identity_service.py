"""
Identity service: registration and credential checks for the built-in
identity provider. Knows nothing about forum standing.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from tenant_commons.core.security import get_password_hash, verify_password
from tenant_commons.models.identity import Identity


class IdentityService:
    """Service class for identity-related operations."""

    @staticmethod
    def get_by_email(session: Session, email: str) -> Optional[Identity]:
        """
        Retrieve an identity by email address.

        Args:
            session: Database session
            email: Email address to search for

        Returns:
            Identity if found, None otherwise
        """
        statement = select(Identity).where(Identity.email == email.lower())
        return session.exec(statement).first()

    @staticmethod
    def get_by_id(session: Session, identity_id: str) -> Optional[Identity]:
        """Retrieve an identity by ID."""
        return session.get(Identity, identity_id)

    @staticmethod
    def create(session: Session, email: str, password: str) -> Identity:
        """
        Create a new identity with a hashed password.

        Args:
            session: Database session
            email: Login email, stored lower-cased
            password: Plain text password

        Returns:
            Created identity instance

        Raises:
            IntegrityError: If the email was registered concurrently
        """
        identity = Identity(
            email=email.lower(),
            hashed_password=get_password_hash(password),
        )
        session.add(identity)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise
        session.refresh(identity)
        return identity

    @staticmethod
    def authenticate(session: Session, email: str, password: str) -> Optional[Identity]:
        """
        Authenticate an identity by email and password.

        Returns:
            Identity if authentication successful, None otherwise
        """
        identity = IdentityService.get_by_email(session, email)
        if not identity:
            return None
        if not verify_password(password, identity.hashed_password):
            return None
        if not identity.is_active:
            return None
        return identity
