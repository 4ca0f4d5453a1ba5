"""
Authentication routes for registration and login.
Provides JWT token-based authentication; the token subject is the identity id.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError

from tenant_commons.api.deps import SessionDep
from tenant_commons.core.logging import get_logger
from tenant_commons.core.security import create_access_token
from tenant_commons.schemas.account import AccountResponse, RegisterRequest
from tenant_commons.schemas.token import Token
from tenant_commons.services.account_service import AccountService
from tenant_commons.services.identity_service import IdentityService

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def register(user_in: RegisterRequest, session: SessionDep) -> AccountResponse:
    """
    Register a new identity and request forum access.

    The account starts out pending until an admin approves it.

    Raises:
        HTTPException: If email already registered
    """
    email_taken = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Email already registered",
    )

    existing = IdentityService.get_by_email(session, email=user_in.email)
    if existing:
        logger.warning(f"Registration attempt with existing email: {user_in.email}")
        raise email_taken

    try:
        identity = IdentityService.create(session, email=user_in.email, password=user_in.password)
    except IntegrityError as e:
        logger.warning(f"Concurrent registration for email: {user_in.email}")
        raise email_taken from e
    account = AccountService.signup(session, identity.id, display_name=user_in.display_name)
    logger.info(f"New identity registered: {identity.email} (ID: {identity.id})")

    return AccountResponse.model_validate(account)


@router.post("/login", response_model=Token)
def login(
    session: SessionDep,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
) -> Token:
    """
    OAuth2 compatible token login.

    Raises:
        HTTPException: If credentials are invalid
    """
    identity = IdentityService.authenticate(
        session, email=form_data.username, password=form_data.password
    )
    if not identity:
        logger.warning(f"Failed login attempt for email: {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    access_token = create_access_token(subject=identity.id)
    logger.info(f"Identity logged in: {identity.email} (ID: {identity.id})")

    return Token(access_token=access_token)
