"""
tests.conftest

Shared fixtures: temporary SQLite store, in-memory broker double, wired service
and dispatcher.
"""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict, deque
from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from account_worker.api.app import build_dispatcher
from account_worker.auth.jwt import JwtConfig, TokenSigner
from account_worker.auth.passwords import PasswordHasher
from account_worker.db.init_db import init_db
from account_worker.db.session import create_engine, create_sessionmaker
from account_worker.messaging.publisher import ResponsePublisher
from account_worker.services.account_service import AccountService
from account_worker.settings import Settings
from account_worker.worker.dispatcher import RequestDispatcher


class InMemoryBroker:
    """LPUSH/BRPOP + PUBLISH semantics over plain Python containers."""

    def __init__(self) -> None:
        self.queues: dict[str, deque[str | bytes]] = defaultdict(deque)
        self.published: list[tuple[str, str]] = []
        self.closed = False

    def push(self, queue: str, message: str | bytes | dict[str, Any]) -> None:
        raw = message if isinstance(message, (str, bytes)) else json.dumps(message)
        self.queues[queue].appendleft(raw)

    async def dequeue(self, queue: str, *, timeout: float) -> str | bytes | None:
        pending = self.queues[queue]
        if not pending:
            # Yield to the loop like a real blocking pop would.
            await asyncio.sleep(min(timeout, 0.01))
            return None
        return pending.pop()

    async def publish(self, channel: str, message: str) -> None:
        self.published.append((channel, message))

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        self.closed = True

    def responses(self) -> list[dict[str, Any]]:
        return [json.loads(message) for _, message in self.published]


class FrozenClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        dequeue_timeout_seconds=0.01,
        message_timeout_seconds=5.0,
        restart_initial_backoff_seconds=0.01,
        restart_max_backoff_seconds=0.05,
    )


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    eng = create_engine(settings)
    await init_db(eng)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def sessions(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 1, 15, 12, 0, 0))


@pytest.fixture
def jwt_cfg(settings: Settings) -> JwtConfig:
    return JwtConfig.from_settings(settings)


@pytest.fixture
def service(
    sessions: async_sessionmaker[AsyncSession], jwt_cfg: JwtConfig, clock: FrozenClock
) -> AccountService:
    return AccountService(
        sessions=sessions,
        hasher=PasswordHasher(rounds=4),
        signer=TokenSigner(jwt_cfg),
        clock=clock,
    )


@pytest.fixture
def broker() -> InMemoryBroker:
    return InMemoryBroker()


@pytest.fixture
def dispatcher(
    settings: Settings, broker: InMemoryBroker, sessions: async_sessionmaker[AsyncSession]
) -> RequestDispatcher:
    return build_dispatcher(settings=settings, broker=broker, sessions=sessions)


@pytest.fixture
def publisher(settings: Settings, broker: InMemoryBroker) -> ResponsePublisher:
    return ResponsePublisher(broker=broker, channel=settings.response_channel)
