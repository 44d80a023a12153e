"""
Database Infrastructure
=======================

Engine, session factory and schema bootstrap for the helpdesk store.

PostgreSQL (asyncpg) is the production backend. SQLite (aiosqlite) serves
local development and the test suite; there every transaction opens with
``BEGIN IMMEDIATE``, which serializes writers the way ``SELECT ... FOR
UPDATE`` row locks do on PostgreSQL.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from sqlalchemy import DateTime, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from helpdesk.config import Settings, settings as default_settings


class Base(DeclarativeBase):
    """Declarative base shared by every ORM model in the service."""


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp column.

    Values are normalized to UTC on the way in and always come back with
    ``tzinfo=UTC``, including on backends that drop the offset (SQLite).
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# Process-wide engine and session factory, set by init_database()
_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """
    Return the active engine.

    Raises:
        RuntimeError: init_database() has not run yet
    """
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call init_database() first.")
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    if _session_maker is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _session_maker


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _configure_sqlite(engine: AsyncEngine) -> None:
    """
    Take the database write lock at the start of every transaction.

    SQLite's built-in ``lower()`` only folds ASCII; it is replaced with
    ``str.lower`` so ticket search folds "Écran" like PostgreSQL does.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def init_database(settings: Optional[Settings] = None) -> AsyncEngine:
    """
    Create the engine and session factory from ``settings``.

    Called from the application lifespan, the seed script and test
    fixtures. Without an argument the environment settings are used.
    """
    global _engine, _session_maker
    settings = settings or default_settings

    # asyncpg spells the libpq sslmode parameter "ssl"
    url = settings.database_url.replace("sslmode=", "ssl=")
    is_sqlite = url.startswith("sqlite")

    engine_kwargs = {"echo": settings.debug, "pool_pre_ping": True}
    if is_sqlite:
        engine_kwargs["connect_args"] = {"timeout": 30}
    else:
        engine_kwargs["pool_size"] = settings.db_pool_size
        engine_kwargs["max_overflow"] = settings.db_max_overflow

    _engine = create_async_engine(url, **engine_kwargs)
    if is_sqlite:
        _configure_sqlite(_engine)

    _session_maker = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return _engine


async def close_database() -> None:
    """Dispose of pooled connections; a later init_database() starts fresh."""
    global _engine, _session_maker

    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_maker = None


@asynccontextmanager
async def get_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Session scope for code outside request handlers (middleware, jobs,
    scripts). Commits on a clean exit and rolls back on error.

    Usage:
        async with get_session_context() as session:
            await SQLAlchemyIdempotencyRepository(session).get(key)
    """
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Services commit their own units of work; anything still pending when
    the handler returns is committed here.
    """
    async with get_session_context() as session:
        yield session


async def create_tables() -> None:
    """
    Create missing tables for every registered model.

    Development and test convenience; deployed databases are migrated.
    """
    import helpdesk.identity.infrastructure.models  # noqa: F401
    import helpdesk.tickets.infrastructure.models  # noqa: F401
    import helpdesk.idempotency.infrastructure.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
