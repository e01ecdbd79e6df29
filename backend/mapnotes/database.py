"""
Map Notes Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory and declarative base for the
       database table backend.
How:   The engine is created at import; sessions are opened per request by
       mapnotes.services.table_provider.get_table().

Connection Pooling:
    Pool sizing only applies to PostgreSQL. SQLite (used by the tests and for
    single-machine installs) keeps SQLAlchemy's default pool for its driver.
"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from mapnotes.config import settings


def build_engine(url: str) -> AsyncEngine:
    """Create an async engine with pool options suited to the URL's dialect."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("postgresql"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **options)


engine = build_engine(settings.database_url)

# expire_on_commit=False: rows stay readable after the append commits.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
