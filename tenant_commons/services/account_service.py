"""
Account service: signup and the admin-driven moderation workflow.

Status moves pending -> approved | rejected under admin control; promote
turns any account into an approved admin. Every transition is checked by the
access policy before the row is touched and is idempotent on repeat.
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from tenant_commons.core.errors import ConflictError
from tenant_commons.core.logging import get_logger
from tenant_commons.models.account import Account, AccountRole, AccountStatus, utcnow
from tenant_commons.services.access_policy import Action, enforce, enforce_on

logger = get_logger(__name__)


def _actor_id(actor: Optional[Account]) -> str:
    return actor.user_id if actor is not None else "anonymous"


class AccountService:
    """Service class for account lookups and status/role transitions."""

    @staticmethod
    def get(session: Session, user_id: str) -> Optional[Account]:
        """Retrieve an account by identity id."""
        return session.get(Account, user_id)

    @staticmethod
    def signup(session: Session, user_id: str, display_name: Optional[str] = None) -> Account:
        """
        Return the account for an identity, creating a pending one on first sight.

        Calling this again for the same identity returns the stored account
        unchanged; status cannot be reset to pending through here.

        Args:
            session: Database session
            user_id: Identity id from the identity provider
            display_name: Optional public name used only when creating

        Returns:
            The (possibly new) account
        """
        account = session.get(Account, user_id)
        if account is not None:
            return account

        account = Account(
            user_id=user_id,
            status=AccountStatus.PENDING,
            role=AccountRole.USER,
            display_name=display_name,
        )
        session.add(account)
        try:
            session.commit()
        except IntegrityError:
            # A concurrent request created it first.
            session.rollback()
            existing = session.get(Account, user_id)
            if existing is None:
                raise
            return existing

        session.refresh(account)
        logger.info(f"Account created for {user_id} (pending approval)")
        return account

    @staticmethod
    def update_profile(session: Session, account: Account, display_name: Optional[str]) -> Account:
        """Change the owner's display name. Status and role are not self-settable."""
        account.display_name = display_name
        account.updated_at = utcnow()
        session.add(account)
        session.commit()
        session.refresh(account)
        return account

    @staticmethod
    def read(session: Session, actor: Optional[Account], user_id: str) -> Account:
        """Read an account as ``actor``: self or admin only."""
        return enforce_on(actor, Action.READ_ACCOUNT, session.get(Account, user_id))

    @staticmethod
    def list_by_status(
        session: Session,
        actor: Optional[Account],
        status: Optional[AccountStatus] = AccountStatus.PENDING,
    ) -> List[Account]:
        """List accounts (pending by default), oldest request first."""
        enforce(actor, Action.MODERATE_ACCOUNT)
        statement = select(Account).order_by(Account.created_at)
        if status is not None:
            statement = statement.where(Account.status == status)
        return list(session.exec(statement).all())

    @staticmethod
    def _load_target(session: Session, actor: Optional[Account], user_id: str) -> Account:
        return enforce_on(actor, Action.MODERATE_ACCOUNT, session.get(Account, user_id))

    @staticmethod
    def _save(session: Session, account: Account) -> Account:
        account.updated_at = utcnow()
        session.add(account)
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise
        session.refresh(account)
        return account

    @staticmethod
    def approve(session: Session, actor: Optional[Account], user_id: str) -> Account:
        """
        Approve an account. Approving an already approved account succeeds
        without changing it.
        """
        target = AccountService._load_target(session, actor, user_id)
        if target.status == AccountStatus.APPROVED:
            logger.info(f"Account {user_id} already approved")
            return target

        target.status = AccountStatus.APPROVED
        if target.approved_at is None:
            target.approved_at = utcnow()
        AccountService._save(session, target)
        logger.info(f"Account {user_id} approved by {_actor_id(actor)}")
        return target

    @staticmethod
    def reject(session: Session, actor: Optional[Account], user_id: str) -> Account:
        """
        Reject a pending request or revoke an approved member's access.

        Raises:
            ConflictError: if the target is an admin (demote first)
        """
        target = AccountService._load_target(session, actor, user_id)
        if target.status == AccountStatus.REJECTED:
            return target
        if target.role == AccountRole.ADMIN:
            raise ConflictError("Admins cannot be rejected, demote the account first")

        target.status = AccountStatus.REJECTED
        AccountService._save(session, target)
        logger.info(f"Account {user_id} rejected by {_actor_id(actor)}")
        return target

    @staticmethod
    def promote(session: Session, actor: Optional[Account], user_id: str) -> Account:
        """Make the account an admin. Promotion always leaves it approved."""
        target = AccountService._load_target(session, actor, user_id)
        if target.role == AccountRole.ADMIN and target.status == AccountStatus.APPROVED:
            return target

        target.role = AccountRole.ADMIN
        target.status = AccountStatus.APPROVED
        if target.approved_at is None:
            target.approved_at = utcnow()
        AccountService._save(session, target)
        logger.info(f"Account {user_id} promoted to admin by {_actor_id(actor)}")
        return target

    @staticmethod
    def demote(session: Session, actor: Optional[Account], user_id: str) -> Account:
        """
        Turn an admin back into an ordinary approved member.

        Raises:
            ConflictError: if an admin tries to demote themself
        """
        target = AccountService._load_target(session, actor, user_id)
        if target.role == AccountRole.USER:
            return target
        if actor is not None and target.user_id == actor.user_id:
            raise ConflictError("Admins cannot demote themselves")

        target.role = AccountRole.USER
        AccountService._save(session, target)
        logger.info(f"Account {user_id} demoted by {_actor_id(actor)}")
        return target

    @staticmethod
    def reopen(session: Session, actor: Optional[Account], user_id: str) -> Account:
        """
        Send a rejected account back to pending review.

        Raises:
            ConflictError: if the account is approved (reject it instead)
        """
        target = AccountService._load_target(session, actor, user_id)
        if target.status == AccountStatus.PENDING:
            return target
        if target.status == AccountStatus.APPROVED:
            raise ConflictError("Only rejected accounts can be reopened")

        target.status = AccountStatus.PENDING
        AccountService._save(session, target)
        logger.info(f"Account {user_id} reopened for review by {_actor_id(actor)}")
        return target
