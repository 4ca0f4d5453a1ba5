"""
Account routes: the caller's own standing and profile.
"""

from fastapi import APIRouter

from tenant_commons.api.deps import AccountDep, ActorDep, SessionDep
from tenant_commons.schemas.account import AccountResponse, AccountUpdate
from tenant_commons.services.account_service import AccountService

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/me", response_model=AccountResponse)
def read_own_account(account: AccountDep) -> AccountResponse:
    """
    Current account, including its approval status.
    Pending and rejected members use this to see why the forum is closed to them.
    """
    return AccountResponse.model_validate(account)


@router.patch("/me", response_model=AccountResponse)
def update_own_account(update: AccountUpdate, account: AccountDep, session: SessionDep) -> AccountResponse:
    """Change the caller's display name. Omitted fields are left alone."""
    if "display_name" in update.model_fields_set:
        account = AccountService.update_profile(session, account, update.display_name)
    return AccountResponse.model_validate(account)


@router.get("/{user_id}", response_model=AccountResponse)
def read_account(user_id: str, actor: ActorDep, session: SessionDep) -> AccountResponse:
    """Read an account. Only the owner and admins may."""
    return AccountResponse.model_validate(AccountService.read(session, actor, user_id))
