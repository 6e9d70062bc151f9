"""
account_worker.worker.handlers

Request type registry.

Responsibilities:
- Map each request `type` tag to one handler coroutine.
- Decode the typed body (and account id for id-scoped types) before calling
  the account service.
"""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable

from pydantic import BaseModel

from account_worker.messaging.schemas import (
    LoginRequest,
    MetricsHistoryQuery,
    RegisterRequest,
    RequestEnvelope,
    UpdateProfileInfoRequest,
    UpdateProfileMetricsRequest,
    decode_body,
    split_scoped_payload,
)
from account_worker.services.account_service import AccountService

HandlerResult = BaseModel | list[BaseModel] | None
Handler = Callable[[RequestEnvelope], Awaitable[HandlerResult]]


class RequestType(enum.StrEnum):
    # Tag values are the wire contract with the gateway.
    register = "register"
    login = "login"
    get_profile_info = "get-profile-info"
    get_profile_metrics = "get-profile-metrics"
    update_profile_info = "update-profile-info"
    update_profile_metrics = "update-profile-metrics"
    get_metrics_history = "get-metrics-history"


def build_handlers(service: AccountService) -> dict[str, Handler]:
    async def register(envelope: RequestEnvelope) -> HandlerResult:
        body = decode_body(RegisterRequest, envelope.payload)
        return await service.register(body, correlation_id=envelope.correlation_id)

    async def login(envelope: RequestEnvelope) -> HandlerResult:
        body = decode_body(LoginRequest, envelope.payload)
        return await service.login(body, correlation_id=envelope.correlation_id)

    async def get_profile_info(envelope: RequestEnvelope) -> HandlerResult:
        account_id, _ = split_scoped_payload(envelope)
        return await service.get_profile_info(account_id)

    async def get_profile_metrics(envelope: RequestEnvelope) -> HandlerResult:
        account_id, _ = split_scoped_payload(envelope)
        return await service.get_profile_metrics(account_id)

    async def update_profile_info(envelope: RequestEnvelope) -> HandlerResult:
        account_id, raw = split_scoped_payload(envelope)
        body = decode_body(UpdateProfileInfoRequest, raw)
        return await service.update_profile_info(account_id, body)

    async def update_profile_metrics(envelope: RequestEnvelope) -> HandlerResult:
        account_id, raw = split_scoped_payload(envelope)
        body = decode_body(UpdateProfileMetricsRequest, raw)
        return await service.update_profile_metrics(account_id, body)

    async def get_metrics_history(envelope: RequestEnvelope) -> HandlerResult:
        account_id, raw = split_scoped_payload(envelope)
        query = decode_body(MetricsHistoryQuery, raw)
        return await service.get_metrics_history(account_id, query)

    return {
        RequestType.register: register,
        RequestType.login: login,
        RequestType.get_profile_info: get_profile_info,
        RequestType.get_profile_metrics: get_profile_metrics,
        RequestType.update_profile_info: update_profile_info,
        RequestType.update_profile_metrics: update_profile_metrics,
        RequestType.get_metrics_history: get_metrics_history,
    }
