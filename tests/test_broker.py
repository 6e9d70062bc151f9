"""
tests.test_broker

Redis broker adapter against an in-process fake Redis server: destructive
dequeue order, empty polls, channel publishing and transport failures.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator

import fakeredis
import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError

from account_worker.api.app import build_dispatcher
from account_worker.errors import TransportError
from account_worker.messaging.broker import RedisBroker


class UnreachableClient:
    async def brpop(self, keys, timeout=0):
        raise RedisConnectionError("Connection refused")

    async def publish(self, channel, message):
        raise RedisConnectionError("Connection refused")

    async def ping(self):
        raise RedisConnectionError("Connection refused")


@pytest_asyncio.fixture
async def redis_client() -> AsyncIterator[fakeredis.FakeAsyncRedis]:
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())
    try:
        yield client
    finally:
        await client.aclose()


async def _next_message(pubsub) -> dict:
    for _ in range(50):
        message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=0.1)
        if message is not None:
            return message
    raise AssertionError("nothing was published")


@pytest.mark.asyncio
async def test_dequeue_pops_oldest_message_first(redis_client) -> None:
    broker = RedisBroker(redis_client)
    await redis_client.lpush("q", "first")
    await redis_client.lpush("q", "second")

    assert await broker.dequeue("q", timeout=1) == b"first"
    assert await redis_client.llen("q") == 1
    assert await broker.dequeue("q", timeout=1) == b"second"
    assert await redis_client.llen("q") == 0


@pytest.mark.asyncio
async def test_empty_poll_returns_none(redis_client) -> None:
    broker = RedisBroker(redis_client)
    assert await broker.dequeue("empty", timeout=1) is None


@pytest.mark.asyncio
async def test_publish_reaches_configured_channel(redis_client) -> None:
    broker = RedisBroker(redis_client)
    pubsub = redis_client.pubsub()
    await pubsub.subscribe("responses")
    try:
        await broker.publish("responses", '{"correlationId":"c1","payload":"null"}')
        message = await _next_message(pubsub)
    finally:
        await pubsub.unsubscribe("responses")
        await pubsub.aclose()

    assert message["channel"] == b"responses"
    assert json.loads(message["data"]) == {"correlationId": "c1", "payload": "null"}


@pytest.mark.asyncio
async def test_publish_without_subscribers_is_not_an_error(redis_client) -> None:
    await RedisBroker(redis_client).publish("nobody-listening", "{}")


@pytest.mark.asyncio
async def test_ping_succeeds_against_live_server(redis_client) -> None:
    await RedisBroker(redis_client).ping()


@pytest.mark.asyncio
async def test_redis_failures_surface_as_transport_errors() -> None:
    broker = RedisBroker(UnreachableClient())

    with pytest.raises(TransportError):
        await broker.dequeue("q", timeout=1)
    with pytest.raises(TransportError):
        await broker.publish("responses", "{}")
    with pytest.raises(TransportError, match="broker unreachable"):
        await broker.ping()


@pytest.mark.asyncio
async def test_dispatcher_survives_non_utf8_message(redis_client, settings, sessions) -> None:
    broker = RedisBroker(redis_client)
    dispatcher = build_dispatcher(settings=settings, broker=broker, sessions=sessions)
    login = {
        "type": "login",
        "correlationId": "after",
        "payload": json.dumps({"email": "a@x.com", "password": "p"}),
    }
    await redis_client.lpush(
        settings.request_queue, b'{"type":"login","correlationId":"c\xff","payload":"{}"}'
    )
    await redis_client.lpush(settings.request_queue, json.dumps(login))

    pubsub = redis_client.pubsub()
    await pubsub.subscribe(settings.response_channel)
    try:
        assert await dispatcher.run_once() is True
        assert await dispatcher.run_once() is True
        message = await _next_message(pubsub)
    finally:
        await pubsub.unsubscribe(settings.response_channel)
        await pubsub.aclose()

    assert await redis_client.llen(settings.request_queue) == 0
    assert json.loads(message["data"])["correlationId"] == "after"
