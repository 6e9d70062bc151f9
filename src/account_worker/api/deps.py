"""
account_worker.api.deps

FastAPI dependency wiring for the HTTP layer.

Responsibilities:
- Provide DB sessions from the sessionmaker created at startup.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created in the lifespan of `account_worker.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session
