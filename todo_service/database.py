"""
Todo Service - Database Engine and Sessions
============================================

What:  Async SQLAlchemy engine factory, session factory and declarative Base.
How:   create_engine() builds a pooled async engine from Settings; the SQL
       todo store opens one session per operation from the session factory.
Who:   SqlTodoStore, Alembic's env.py and the SQL store tests.
When:  Only when STORE_BACKEND=database; the memory backend never opens
       a connection.

Connection Pooling:
    pool_size / max_overflow come from settings. pool_pre_ping validates a
    connection before use. SQLite (used in tests) ignores pool sizing, so
    those arguments are only passed for server databases.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from todo_service.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads for --autogenerate.
    """
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Build the async engine described by settings.database_url.

    SQL echo is enabled when LOG_LEVEL=DEBUG.
    """
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory with expire_on_commit=False, so records read inside a
    session can still be converted to schemas after it closes.
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
