"""
Database Connection Management

One async engine per process (asyncpg), one session per request. The
session commits when the request's handler returns and rolls back when
it raises. The database URL carries credentials: do not log it.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from healthtracker.config import get_settings
from healthtracker.config.logging_config import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the tickets, ticket_replies and devices tables."""


class DatabaseNotInitializedError(RuntimeError):
    def __init__(self) -> None:
        super().__init__("Database not initialized; the application lifespan has not run")


class DatabaseManager:
    """
    Owns the engine and the session factory.

    `initialize()` runs in the application lifespan and `close()` on
    shutdown. Tests that never enter the lifespan override the session
    dependency instead.
    """

    def __init__(self, url: Optional[str] = None) -> None:
        self._url = url
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> Optional[AsyncEngine]:
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def initialize(self) -> None:
        if self._engine is not None:
            logger.warning("Database already initialized")
            return

        settings = get_settings()
        db = settings.database
        self._engine = create_async_engine(
            self._url or db.async_url,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_pre_ping=True,
            echo=settings.debug,
        )
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False, autoflush=False)
        logger.info("Database engine created", pool_size=db.pool_size, max_overflow=db.max_overflow)

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessions is None:
            raise DatabaseNotInitializedError()

        async with self._sessions() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            await session.commit()

    async def health_check(self) -> bool:
        """True when `SELECT 1` succeeds."""
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database health check failed", error=str(e))
            return False
        return True


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: a session for the duration of one request."""
    async with get_db_manager().session() as session:
        yield session
