"""Database connection and session management."""

from collections.abc import AsyncGenerator
from pathlib import Path

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from wppd.config import Settings
from wppd.models.database import Base


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL.

    SQLite connections get foreign key enforcement switched on so that
    deleting a site or plugin cascades to its links and vulnerabilities.
    In-memory SQLite shares a single connection across the process.
    """
    kwargs: dict = {"echo": settings.api_debug}
    is_sqlite = settings.database_url.startswith("sqlite")

    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in settings.database_url:
            kwargs["poolclass"] = StaticPool
        else:
            database = make_url(settings.database_url).database
            if database:
                Path(database).parent.mkdir(parents=True, exist_ok=True)
    else:
        kwargs.update(pool_size=10, max_overflow=20, pool_pre_ping=True)

    engine = create_async_engine(settings.database_url, **kwargs)

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    session_factory = request.app.state.container.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
