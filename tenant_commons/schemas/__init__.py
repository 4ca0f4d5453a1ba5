"""Pydantic schemas for request/response validation."""

from tenant_commons.schemas.account import AccountResponse, AccountUpdate, RegisterRequest
from tenant_commons.schemas.token import Token, TokenPayload

__all__ = ["AccountResponse", "AccountUpdate", "RegisterRequest", "Token", "TokenPayload"]
