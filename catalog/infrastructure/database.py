"""Database Session Manager — async engine, per-request sessions and the readiness ping.

Invariants:
    - A session that exits with a SQLAlchemy error is rolled back and the
      error surfaces as DatabaseError (503), never as a raw driver exception
    - Unique violations never reach this layer: the stores commit and map
      them to StoreValidationError themselves
    - Pool sizing applies to server databases only; SQLite uses the driver's
      default pool

Design Decisions:
    - Module-level db_manager set by init_db from the app lifespan
    - expire_on_commit=False: payloads are built from entities after commit
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from catalog.core.errors import DatabaseError

logger = logging.getLogger(__name__)


def _failed_operation(exc: SQLAlchemyError) -> str:
    if isinstance(exc, OperationalError):
        return "execute"
    if isinstance(exc, DBAPIError):
        return "driver"
    return "session"


class DatabaseSessionManager:
    """Owns the catalog engine and hands out sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_options = {"pool_pre_ping": True}
        if make_url(database_url).get_backend_name() != "sqlite":
            engine_options.update(
                pool_size=pool_size, max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            operation = _failed_operation(e)
            logger.error(f"Catalog database {operation} failed: {e}")
            raise DatabaseError(type(e).__name__, operation) from e
        finally:
            await session.close()

    async def ping(self) -> float | None:
        """Round-trip latency in milliseconds, or None when unreachable."""
        started = time.perf_counter()
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except (DatabaseError, OSError):
            return None
        return round((time.perf_counter() - started) * 1000, 2)

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def close_db() -> None:
    global db_manager
    if db_manager:
        await db_manager.dispose()
        db_manager = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
