"""
account_worker.api.app

FastAPI app factory and composition root for the account worker.

Responsibilities:
- Build the FastAPI application exposing the liveness/readiness endpoints.
- Initialize and dispose shared infrastructure (DB engine, broker client).
- Start the supervised request dispatcher for the lifetime of the app.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from account_worker.api.routers.health import router as health_router
from account_worker.auth.jwt import JwtConfig, TokenSigner
from account_worker.auth.passwords import PasswordHasher
from account_worker.db.init_db import init_db
from account_worker.db.session import create_engine, create_sessionmaker
from account_worker.messaging.broker import Broker, RedisBroker
from account_worker.messaging.publisher import ResponsePublisher
from account_worker.observability.logging import configure_logging, get_logger
from account_worker.services.account_service import AccountService
from account_worker.settings import Settings
from account_worker.worker.dispatcher import RequestDispatcher
from account_worker.worker.handlers import build_handlers
from account_worker.worker.supervisor import supervise

log = get_logger(__name__)


def build_dispatcher(
    *,
    settings: Settings,
    broker: Broker,
    sessions: async_sessionmaker[AsyncSession],
) -> RequestDispatcher:
    service = AccountService(
        sessions=sessions,
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        signer=TokenSigner(JwtConfig.from_settings(settings)),
    )
    return RequestDispatcher(
        broker=broker,
        publisher=ResponsePublisher(broker=broker, channel=settings.response_channel),
        handlers=build_handlers(service),
        queue=settings.request_queue,
        dequeue_timeout=settings.dequeue_timeout_seconds,
        message_timeout=settings.message_timeout_seconds,
    )


def create_app(*, settings: Settings, broker: Broker | None = None) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        # StorageError/TransportError raised here abort startup.
        if settings.auto_create_schema:
            await init_db(engine)

        app.state.broker = broker or RedisBroker.from_url(settings.redis_url)
        await app.state.broker.ping()

        dispatcher: RequestDispatcher | None = None
        worker_task: asyncio.Task[None] | None = None
        if settings.worker_enabled:
            dispatcher = build_dispatcher(
                settings=settings, broker=app.state.broker, sessions=app.state.sessionmaker
            )
            worker_task = asyncio.create_task(
                supervise(
                    dispatcher.run_forever,
                    name="request-dispatcher",
                    initial_backoff=settings.restart_initial_backoff_seconds,
                    max_backoff=settings.restart_max_backoff_seconds,
                    healthy_after=settings.restart_healthy_after_seconds,
                ),
                name="request-dispatcher",
            )
        app.state.dispatcher = dispatcher

        try:
            yield
        finally:
            if dispatcher is not None and worker_task is not None:
                dispatcher.stop()
                worker_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await worker_task
            await app.state.broker.close()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Account Worker",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        openapi_url=None,
    )
    app.include_router(health_router, tags=["health"])
    return app


# --- Module Notes -----------------------------------------------------------
# The HTTP surface is liveness only; all account operations arrive over the broker.
