"""
account_worker.db.session

Async SQLAlchemy engine, session factory and transaction scope.

Responsibilities:
- Create the async engine from settings.
- Create the async sessionmaker with safe defaults.
- Provide `transaction()`: one session, commit on success, rollback on every
  other exit path.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from account_worker.errors import StorageError
from account_worker.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    kwargs: dict[str, object] = {"pool_pre_ping": True}
    # SQLite (dev/tests) does not take pool sizing arguments.
    if make_url(settings.database_url).get_backend_name() != "sqlite":
        kwargs["pool_size"] = settings.database_pool_size
    return create_async_engine(settings.database_url, **kwargs)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False keeps ORM rows readable after commit for response building.
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Explicit transaction scope for a single handler invocation.

    Domain errors raised inside the block propagate unchanged after rollback;
    SQLAlchemy errors (including commit failures) surface as `StorageError`.
    """

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise StorageError(f"transaction failed: {e.__class__.__name__}") from e
        except BaseException:
            await session.rollback()
            raise


# --- Module Notes -----------------------------------------------------------
# Handlers never call commit themselves; the scope above is the only commit point.
