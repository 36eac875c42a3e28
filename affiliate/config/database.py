"""
Database engine and session factory.

All affiliate services run on an AsyncSession; callers own the session
lifetime (one session per request, job or queue message).
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from affiliate.config.settings import settings


def create_engine(database_url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """
    Create async engine.

    SQLite (tests, local runs) gets a single shared connection so an
    in-memory database survives across sessions; other backends get a
    regular connection pool.

    Args:
        database_url: Override for settings.database_url
        echo: Override for settings.database_echo

    Returns:
        Configured async engine
    """
    url = database_url or settings.database_url
    echo = settings.database_echo if echo is None else echo

    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_savepoints(engine)
        return engine

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Provide a session that is rolled back if the block raises.

    Services commit their own units of work; this only guarantees that
    nothing half-written leaks out of a failed block.
    """
    async with session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Let SQLAlchemy own BEGIN on SQLite.

    The sqlite3 driver defers BEGIN until the first write, which breaks
    SAVEPOINT (begin_nested) inside a session transaction.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")
