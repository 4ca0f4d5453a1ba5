"""
API dependencies for FastAPI dependency injection.
Resolves the bearer token to an identity and the identity to its account.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from tenant_commons.core.config import settings
from tenant_commons.core.errors import AccessDenied, DenialReason
from tenant_commons.core.logging import get_logger
from tenant_commons.core.security import decode_access_token
from tenant_commons.db.session import get_session
from tenant_commons.models.account import Account
from tenant_commons.models.identity import Identity
from tenant_commons.services.account_service import AccountService
from tenant_commons.services.evidence_storage import EvidenceStorage, get_evidence_storage
from tenant_commons.services.identity_service import IdentityService

logger = get_logger(__name__)

# auto_error=False lets anonymous requests through; the policy decides what they may do
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False)

SessionDep = Annotated[Session, Depends(get_session)]


def get_current_identity(
    session: SessionDep,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> Optional[Identity]:
    """
    Resolve the bearer token to an identity.

    Returns:
        The identity, or None for an anonymous request (no token)

    Raises:
        HTTPException: If a token is present but invalid, or the identity is gone
    """
    if token is None:
        return None

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    identity_id = decode_access_token(token)
    if identity_id is None:
        logger.warning("JWT validation failed")
        raise credentials_exception

    identity = IdentityService.get_by_id(session, identity_id)
    if identity is None:
        logger.warning(f"Identity {identity_id} not found")
        raise credentials_exception
    if not identity.is_active:
        logger.warning(f"Inactive identity {identity.id} attempted access")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")

    return identity


def get_optional_identity(
    session: SessionDep,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> Optional[Identity]:
    """
    Resolve the bearer token for public routes.

    A bad, expired or orphaned token is treated as anonymous so an expired
    session never blocks public pages or incident reports.
    """
    if token is None:
        return None

    identity_id = decode_access_token(token)
    identity = IdentityService.get_by_id(session, identity_id) if identity_id else None
    if identity is None or not identity.is_active:
        logger.info("Ignoring unusable token on public route")
        return None
    return identity


def get_current_account(
    session: SessionDep,
    identity: Annotated[Optional[Identity], Depends(get_current_identity)],
) -> Optional[Account]:
    """
    The actor for this request: the identity's account, created pending on
    first sight, or None when anonymous.
    """
    if identity is None:
        return None
    return AccountService.signup(session, identity.id)


def get_optional_account(
    session: SessionDep,
    identity: Annotated[Optional[Identity], Depends(get_optional_identity)],
) -> Optional[Account]:
    """Like ``get_current_account`` but never fails on a bad token."""
    if identity is None:
        return None
    return AccountService.signup(session, identity.id)


def require_account(
    account: Annotated[Optional[Account], Depends(get_current_account)],
) -> Account:
    """Like ``get_current_account`` but anonymous requests are refused."""
    if account is None:
        raise AccessDenied(DenialReason.NOT_AUTHENTICATED)
    return account


ActorDep = Annotated[Optional[Account], Depends(get_current_account)]
PublicActorDep = Annotated[Optional[Account], Depends(get_optional_account)]
AccountDep = Annotated[Account, Depends(require_account)]
EvidenceStorageDep = Annotated[EvidenceStorage, Depends(get_evidence_storage)]
