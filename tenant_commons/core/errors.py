"""
Domain exceptions and their HTTP translation.

Services raise these; routes never catch them. ``setup_exception_handlers``
maps each one onto a JSON response carrying a machine-readable ``reason`` so
the front end can branch on it (e.g. "pending approval" vs "admin required").
"""

from enum import Enum
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tenant_commons.core.logging import get_logger

logger = get_logger(__name__)


class DenialReason(str, Enum):
    """Why the access policy refused an action."""

    NOT_AUTHENTICATED = "not_authenticated"
    NOT_APPROVED = "not_approved"
    NOT_ADMIN = "not_admin"
    WRONG_CATEGORY_RESTRICTION = "wrong_category_restriction"
    RESOURCE_NOT_FOUND = "resource_not_found"


DEFAULT_DENIAL_MESSAGES = {
    DenialReason.NOT_AUTHENTICATED: "Sign in to continue",
    DenialReason.NOT_APPROVED: "Your account has not been approved for forum access",
    DenialReason.NOT_ADMIN: "Admin access required",
    DenialReason.WRONG_CATEGORY_RESTRICTION: "Announcements are admin-only, please select another category",
    DenialReason.RESOURCE_NOT_FOUND: "Resource not found",
}

DENIAL_STATUS_CODES = {
    DenialReason.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    DenialReason.NOT_APPROVED: status.HTTP_403_FORBIDDEN,
    DenialReason.NOT_ADMIN: status.HTTP_403_FORBIDDEN,
    DenialReason.WRONG_CATEGORY_RESTRICTION: status.HTTP_403_FORBIDDEN,
    DenialReason.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


class DomainError(Exception):
    """Base class for errors the API surfaces to callers as-is."""

    reason = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccessDenied(DomainError):
    """Raised when the access policy denies an action. Terminal for the request."""

    def __init__(self, reason: DenialReason, message: Optional[str] = None):
        super().__init__(message or DEFAULT_DENIAL_MESSAGES[reason])
        self.reason = reason


class ValidationFailed(DomainError):
    """A required field is missing or malformed. Raised before any policy check."""

    reason = "validation_error"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class ConflictError(DomainError):
    """The request collides with existing state (duplicate name, illegal transition)."""

    reason = "conflict"


async def access_denied_handler(request: Request, exc: AccessDenied) -> JSONResponse:
    headers = None
    if exc.reason == DenialReason.NOT_AUTHENTICATED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=DENIAL_STATUS_CODES[exc.reason],
        content={"detail": exc.message, "reason": exc.reason.value},
        headers=headers,
    )


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.message, "reason": exc.reason, "field": exc.field},
    )


async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": exc.message, "reason": exc.reason},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers for every domain exception on the application."""
    app.add_exception_handler(AccessDenied, access_denied_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ValidationFailed, validation_failed_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ConflictError, conflict_handler)  # type: ignore[arg-type]
    logger.debug("Domain exception handlers registered")
