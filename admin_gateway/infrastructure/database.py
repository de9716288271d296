"""Session Store Database — async engine and sessions backing admin_sessions.

Invariants:
    - A session that raises is rolled back and closed before the error leaves
    - SQLAlchemy errors leave this module only as DatabaseError (core/errors.py),
      tagged with the failing phase (commit / execute / query / unknown)
    - pool_pre_ping on every engine: stale pooled connections are replaced

Design Decisions:
    - Module-level db_manager set by the lifespan through init_db(); importing
      this module opens no connections
    - expire_on_commit=False: records stay readable after commit in async code
    - SQLite URLs get no pool sizing (aiosqlite in tests)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from admin_gateway.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors
_FAILURE_PHASES: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Session store constraint violated", "commit"),
    (OperationalError, "Session store unreachable", "execute"),
    (DBAPIError, "Session store driver error", "query"),
    (SQLAlchemyError, "Session store operation failed", "unknown"),
)


def _engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict:
    options: dict = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        return options
    options.update(pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600)
    return options


def to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    """Map a SQLAlchemy failure onto DatabaseError by its phase."""
    for exc_type, message, operation in _FAILURE_PHASES:
        if isinstance(exc, exc_type):
            return DatabaseError(message, operation)
    return DatabaseError("Session store operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine; hands out sessions that roll back on failure."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url, **_engine_options(database_url, pool_size, max_overflow),
        )
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                mapped = to_database_error(e)
                logger.error(
                    f"Session store {mapped.operation} failed: {type(e).__name__}",
                    extra={"error_code": mapped.code},
                )
                raise mapped from e

    async def health_check(self) -> bool:
        """True when the session store answers SELECT 1."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except (DatabaseError, OSError) as e:
            logger.error(f"Session store health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session store session per request."""
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
