"""Async SQLAlchemy engine and session scope for the credential and request-log store."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# The credential table is written by operator tooling while the bot reads it.
SQLITE_BUSY_TIMEOUT_MS = 30_000


def normalize_database_url(url: str) -> str:
    """Coerce a sync sqlite URL to the aiosqlite driver."""
    url = (url or "").strip()
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


class Database:
    """Async database connection manager.

    DAOs open a transactional scope with `session()`.
    """

    def __init__(self, database_url: str):
        url = normalize_database_url(database_url)
        self.is_sqlite = url.startswith("sqlite")
        connect_args = {"timeout": SQLITE_BUSY_TIMEOUT_MS / 1000} if self.is_sqlite else {}

        self._engine: AsyncEngine = create_async_engine(url, connect_args=connect_args)
        self._sessions: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self._engine, expire_on_commit=False
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Commit on success, roll back and re-raise on error."""
        async with self._sessions() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def init_db(self) -> None:
        """Create missing tables from ORM metadata (tests and `auto_create_tables`).

        Deployed databases are migrated with Alembic instead.
        """
        async with self._engine.begin() as conn:
            if self.is_sqlite:
                await conn.execute(text(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}"))
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self._engine.dispose()
