"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - engine: The async database engine (connection pool for production DBs)
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request
  - get_session_factory(): FastAPI dependency for multi-session batch work
  - atomic(): The unit-of-work scope every money-moving operation runs in

Architecture note:
  We use async SQLAlchemy (with aiosqlite for SQLite) so the API can handle
  concurrent requests without blocking. When migrating to PostgreSQL, only
  the DATABASE_URL needs to change (to use the asyncpg driver).

Unit of work:
  Each core operation opens exactly one database transaction with atomic().
  The transaction commits when the block exits normally and rolls back on
  any exception, so a failed operation never leaves partial effects.
  Storage errors raised inside the block are translated into the domain
  taxonomy: lock contention becomes ConflictError, everything else
  PersistenceError.
"""

import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from yieldwallet.config import settings
from yieldwallet.exceptions import ConflictError, PersistenceError

logger = logging.getLogger(__name__)

# Driver messages that mean "another transaction holds the row/table"
# (SQLite busy/locked, PostgreSQL deadlock and serialization failures)
_CONTENTION_MARKERS = ("database is locked", "deadlock", "could not serialize")


# echo=True in debug mode logs all SQL statements
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False keeps attributes readable after commit; otherwise
# touching them would trigger a lazy load, which fails in async context.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/wallet")
        async def get_wallet(db: AsyncSession = Depends(get_db)):
            ...

    Money-moving services commit their own unit of work through atomic();
    the commit here only closes out read-only work. Any exception rolls
    the session back before it is closed.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker:
    """
    FastAPI dependency for work that opens its own sessions.

    The accrual batch runs each position in a separate session, so it takes
    the factory instead of a single session from get_db().
    """
    return AsyncSessionLocal


@asynccontextmanager
async def atomic(db: AsyncSession):
    """
    Run the enclosed block as one database transaction.

    Usage:
        async with atomic(db):
            await adjust_balance(db, user_id, -amount_cents)
            await append(db, ...)

    Commits on normal exit, rolls back on any exception. Domain errors
    propagate unchanged; SQLAlchemy errors are logged and re-raised as
    ConflictError (lock contention) or PersistenceError (anything else).
    """
    try:
        async with db.begin():
            yield db
    except OperationalError as exc:
        message = str(exc.orig).lower()
        if any(marker in message for marker in _CONTENTION_MARKERS):
            logger.warning(f"Concurrent update rejected: {exc.orig}")
            raise ConflictError() from exc
        logger.error("Storage failure, transaction rolled back", exc_info=True)
        raise PersistenceError() from exc
    except SQLAlchemyError as exc:
        logger.error("Storage failure, transaction rolled back", exc_info=True)
        raise PersistenceError() from exc
