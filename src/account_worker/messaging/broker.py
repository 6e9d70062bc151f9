"""
account_worker.messaging.broker

Broker client boundary.

Responsibilities:
- Define the `Broker` capability the dispatcher and publisher depend on.
- Implement it over Redis/KeyDB: destructive blocking dequeue (`BRPOP`) from a
  request list and `PUBLISH` to a response channel.
- Surface every Redis failure as `TransportError`.
"""

from __future__ import annotations

from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from account_worker.errors import TransportError
from account_worker.observability.logging import get_logger

log = get_logger(__name__)


class Broker(Protocol):
    async def dequeue(self, queue: str, *, timeout: float) -> str | bytes | None: ...

    async def publish(self, channel: str, message: str) -> None: ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...


class RedisBroker:
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisBroker:
        return cls(redis.from_url(url, decode_responses=False, health_check_interval=30))

    async def dequeue(self, queue: str, *, timeout: float) -> bytes | None:
        # Raw bytes: text decoding happens per message in the dispatcher.
        # BRPOP removes the message atomically; no other consumer can see it afterwards.
        try:
            result = await self._client.brpop([queue], timeout=timeout)
        except RedisError as e:
            raise TransportError(f"dequeue from {queue} failed: {e}") from e
        if result is None:
            return None
        _, value = result
        return value

    async def publish(self, channel: str, message: str) -> None:
        try:
            receivers = await self._client.publish(channel, message)
        except RedisError as e:
            raise TransportError(f"publish to {channel} failed: {e}") from e
        if receivers == 0:
            log.warning("response_without_subscribers", channel=channel)

    async def ping(self) -> None:
        try:
            await self._client.ping()
        except RedisError as e:
            raise TransportError(f"broker unreachable: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()


# --- Module Notes -----------------------------------------------------------
# Pub/sub delivery is fire-and-forget: a response published with no subscriber is lost,
# which is why callers must time out correlation ids on their side.
