"""
Account schemas for API request/response validation.
Separates internal models from API contracts using Pydantic.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, EmailStr, StringConstraints

from tenant_commons.models.account import AccountRole, AccountStatus

DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]


class RegisterRequest(BaseModel):
    """Schema for signing up with the built-in identity provider."""

    email: EmailStr
    password: Annotated[str, StringConstraints(min_length=8, max_length=72)]
    display_name: Optional[DisplayName] = None


class AccountUpdate(BaseModel):
    """Fields an account owner may change. Status and role are admin-only."""

    display_name: Optional[DisplayName] = None


class AccountResponse(BaseModel):
    """
    Schema for account data in API responses.
    Never includes credentials.
    """

    user_id: str
    status: AccountStatus
    role: AccountRole
    display_name: Optional[str] = None
    created_at: datetime
    approved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
