"""
Main FastAPI application entry point.
Configures the application, middleware, and routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from tenant_commons.api.routes import accounts, admin, auth, forum, health, site, submissions
from tenant_commons.core.config import settings
from tenant_commons.core.errors import setup_exception_handlers
from tenant_commons.core.logging import get_logger, setup_logging
from tenant_commons.db.session import create_db_and_tables, engine
from tenant_commons.models.account import Account, AccountRole, AccountStatus, utcnow
from tenant_commons.services.identity_service import IdentityService

# Setup logging
setup_logging()
logger = get_logger(__name__)


def bootstrap_admin(session: Session) -> None:
    """
    Make sure the configured first admin exists and can sign in.
    The account is created approved so the review queue has someone to work it.
    """
    identity = IdentityService.get_by_email(session, settings.FIRST_SUPERUSER_EMAIL)
    if identity is None:
        logger.info("Creating first admin...")
        identity = IdentityService.create(
            session,
            email=settings.FIRST_SUPERUSER_EMAIL,
            password=settings.FIRST_SUPERUSER_PASSWORD,
        )

    account = session.get(Account, identity.id)
    if account is not None and account.is_admin:
        return

    if account is None:
        account = Account(user_id=identity.id, display_name="Admin")
    account.role = AccountRole.ADMIN
    account.status = AccountStatus.APPROVED
    if account.approved_at is None:
        account.approved_at = utcnow()
    session.add(account)
    session.commit()
    logger.info(f"Admin account ready: {settings.FIRST_SUPERUSER_EMAIL}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.
    Runs startup and shutdown logic.
    """
    # Startup
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")

    logger.info("Creating database tables...")
    create_db_and_tables()

    if not settings.DISABLE_BOOTSTRAP_USERS:
        with Session(engine) as session:
            try:
                bootstrap_admin(session)
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Failed to create first admin: {e}")
                logger.warning("Continuing without a bootstrap admin. Accounts cannot be approved until one exists.")
    else:
        logger.info("User bootstrapping disabled (DISABLE_BOOTSTRAP_USERS=true)")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url=f"{settings.API_V1_PREFIX}/docs",
    redoc_url=f"{settings.API_V1_PREFIX}/redoc",
    lifespan=lifespan,
)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["authorization", "content-type", "accept"],
    )

setup_exception_handlers(app)

app.include_router(health.router, prefix=settings.API_V1_PREFIX)
app.include_router(site.router, prefix=settings.API_V1_PREFIX)
app.include_router(auth.router, prefix=settings.API_V1_PREFIX)
app.include_router(accounts.router, prefix=settings.API_V1_PREFIX)
app.include_router(forum.router, prefix=settings.API_V1_PREFIX)
app.include_router(admin.router, prefix=settings.API_V1_PREFIX)
app.include_router(submissions.router, prefix=settings.API_V1_PREFIX)
