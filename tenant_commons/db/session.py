"""
Database session management using SQLModel.
Provides session factory and dependency injection for FastAPI routes.
"""

from typing import Generator

from sqlmodel import Session, SQLModel, create_engine

from tenant_commons.core.config import settings

if settings.is_sqlite:
    engine = create_engine(
        settings.SQLALCHEMY_DATABASE_URI,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False},  # Allow multi-threading for SQLite
    )
else:
    # pool_pre_ping ensures connections are alive before using them
    engine = create_engine(
        settings.SQLALCHEMY_DATABASE_URI,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_db_and_tables() -> None:
    """Create every table registered on the SQLModel metadata."""
    # Model modules must be imported so their tables are registered
    from tenant_commons.models import account, forum, identity, submission  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session for FastAPI routes.
    One session per request; services commit or roll back explicitly.

    Yields:
        Database session instance
    """
    with Session(engine) as session:
        yield session
