"""
account_worker.messaging.publisher

Response publisher.

Responsibilities:
- Wrap a handler result (or the `"null"` sentinel) with the triggering
  correlation id into a `ResponseEnvelope`.
- Publish every response on the single shared response channel.
"""

from __future__ import annotations

from pydantic import BaseModel

from account_worker.messaging.broker import Broker
from account_worker.messaging.schemas import ErrorPayload, ResponseEnvelope, encode_result
from account_worker.observability.logging import get_logger

log = get_logger(__name__)


class ResponsePublisher:
    def __init__(self, *, broker: Broker, channel: str) -> None:
        self._broker = broker
        self._channel = channel

    async def publish(
        self, correlation_id: str, result: BaseModel | list[BaseModel] | None
    ) -> ResponseEnvelope:
        envelope = ResponseEnvelope(correlation_id=correlation_id, payload=encode_result(result))
        await self._send(envelope)
        return envelope

    async def publish_error(
        self, correlation_id: str, *, code: str, message: str
    ) -> ResponseEnvelope:
        payload = ErrorPayload(error=code, message=message, correlation_id=correlation_id)
        envelope = ResponseEnvelope(
            correlation_id=correlation_id,
            payload=payload.model_dump_json(by_alias=True),
            error=code,
        )
        await self._send(envelope)
        return envelope

    async def _send(self, envelope: ResponseEnvelope) -> None:
        await self._broker.publish(self._channel, envelope.to_json())
        log.debug("response_published", channel=self._channel, error=envelope.error)
