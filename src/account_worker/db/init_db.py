"""
account_worker.db.init_db

Schema provisioning at process startup.

Responsibilities:
- Create the `accounts` and `metrics_history` tables if they don't exist.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from account_worker.db import models  # noqa: F401  # ensure models are registered on Base.metadata
from account_worker.db.base import Base
from account_worker.errors import StorageError


async def init_db(engine: AsyncEngine) -> None:
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        raise StorageError(f"schema provisioning failed: {e}") from e


# --- Module Notes -----------------------------------------------------------
# Called from the app startup hook; a StorageError here aborts startup.
