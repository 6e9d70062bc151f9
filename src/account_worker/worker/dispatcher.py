"""
account_worker.worker.dispatcher

Request dispatcher (the consumption loop).

Responsibilities:
- Dequeue one message at a time from the request queue (destructive read).
- Decode the envelope, route on `type` to exactly one handler, publish the result.
- Isolate per-message failures: log with the correlation id, answer with an
  error-tagged response where a correlation id is known, keep consuming.
- Bound each message by a deadline; expiry counts as a storage failure.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

from account_worker.errors import AccountServiceError, StorageError, TransportError
from account_worker.messaging.broker import Broker
from account_worker.messaging.publisher import ResponsePublisher
from account_worker.messaging.schemas import (
    RequestEnvelope,
    ResponseEnvelope,
    decode_request,
    extract_correlation_id,
)
from account_worker.observability.logging import (
    bind_message_context,
    clear_message_context,
    get_logger,
)
from account_worker.worker.handlers import Handler

log = get_logger(__name__)


class RequestDispatcher:
    def __init__(
        self,
        *,
        broker: Broker,
        publisher: ResponsePublisher,
        handlers: Mapping[str, Handler],
        queue: str,
        dequeue_timeout: float = 5.0,
        message_timeout: float = 30.0,
    ) -> None:
        self._broker = broker
        self._publisher = publisher
        self._handlers = dict(handlers)
        self._queue = queue
        self._dequeue_timeout = dequeue_timeout
        self._message_timeout = message_timeout
        self._stopping = False

    def stop(self) -> None:
        # Takes effect after the current dequeue/message completes.
        self._stopping = True

    async def run_forever(self) -> None:
        """
        Consume until `stop()` is called.

        TransportError propagates so the supervisor can restart the loop with backoff.
        """

        self._stopping = False
        log.info("dispatcher_started", queue=self._queue)
        while not self._stopping:
            await self.run_once()
        log.info("dispatcher_stopped", queue=self._queue)

    async def run_once(self) -> bool:
        raw = await self._broker.dequeue(self._queue, timeout=self._dequeue_timeout)
        if raw is None:
            return False
        try:
            await self.handle_message(raw)
        finally:
            clear_message_context()
        return True

    async def handle_message(self, raw: str | bytes) -> ResponseEnvelope | None:
        try:
            envelope = decode_request(raw)
        except AccountServiceError as e:
            correlation_id = extract_correlation_id(raw)
            bind_message_context(correlation_id=correlation_id, request_type=None)
            log.warning("request_decode_failed", error=e.message)
            if correlation_id is None:
                # Nothing to correlate a response to; the caller times out.
                return None
            return await self._publisher.publish_error(
                correlation_id, code=e.code, message=e.message
            )

        bind_message_context(correlation_id=envelope.correlation_id, request_type=envelope.type)
        handler = self._handlers.get(envelope.type)
        if handler is None:
            log.warning("unknown_request_type")
            return None

        log.info("request_received")
        return await self._dispatch(handler, envelope)

    async def _dispatch(self, handler: Handler, envelope: RequestEnvelope) -> ResponseEnvelope:
        correlation_id = envelope.correlation_id
        try:
            result = await asyncio.wait_for(handler(envelope), timeout=self._message_timeout)
        except TimeoutError:
            err = StorageError(f"request exceeded deadline of {self._message_timeout}s")
            log.error("request_deadline_exceeded", timeout=self._message_timeout)
            return await self._publisher.publish_error(
                correlation_id, code=err.code, message=err.message
            )
        except TransportError:
            raise
        except AccountServiceError as e:
            log.warning("request_failed", error_code=e.code, error=e.message)
            return await self._publisher.publish_error(
                correlation_id, code=e.code, message=e.message
            )
        except Exception:
            log.exception("request_crashed")
            return await self._publisher.publish_error(
                correlation_id, code=AccountServiceError.code, message="internal error"
            )

        response = await self._publisher.publish(correlation_id, result)
        log.info("request_completed", empty=result is None)
        return response


# --- Module Notes -----------------------------------------------------------
# Unknown request types are dropped without a response; the gateway owns correlation
# timeouts. Processing is strictly sequential per dispatcher instance.
