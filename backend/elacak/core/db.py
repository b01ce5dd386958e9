"""
Async SQLAlchemy engine + session dependency.

Usage in FastAPI endpoints:
    async def my_endpoint(db: AsyncSession = Depends(get_db)):
        ...
"""
import logging
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from elacak.core.config import get_settings
from elacak.core.errors import ConflictError, StorageError

logger = logging.getLogger(__name__)

_settings = get_settings()

_engine_kwargs: dict = {"echo": False}
if not _settings.database_url.startswith("sqlite"):
    _engine_kwargs.update(pool_size=5, max_overflow=2, pool_pre_ping=True)

engine = create_async_engine(_settings.database_url, **_engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an async DB session."""
    async with AsyncSessionLocal() as session:
        yield session


async def check_db_connection() -> bool:
    """Return True if the database is reachable."""
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        logger.error("Database health check failed: %s", exc)
        return False


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP (without time zone) columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime | None) -> datetime | None:
    """Convert an aware datetime to naive UTC for comparison with TIMESTAMP columns."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


async def commit_or_raise(db: AsyncSession, conflict_message: str) -> None:
    """
    Commit the session's pending writes.

    A unique-constraint violation that slipped past the pre-checks (two
    concurrent writers) surfaces as ConflictError; anything else as
    StorageError. The session is rolled back in both cases.
    """
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Integrity violation on commit: %s", exc.orig)
        raise ConflictError(conflict_message) from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Commit failed: %s", exc)
        raise StorageError("Failed to persist changes") from exc
