"""
account_worker.messaging.schemas

Wire models for the request/response protocol.

Responsibilities:
- Define the request and response envelopes exchanged over the broker.
- Define one explicit pydantic model per payload type (camelCase on the wire).
- Decode raw text into typed models, raising `ValidationError` on bad input.
- Resolve the account id of id-scoped requests (typed field or legacy `id;json`).
"""

from __future__ import annotations

import json
import uuid
from datetime import date, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from account_worker.db.models import Account, MetricField, MetricsHistoryRecord
from account_worker.errors import ValidationError

SCOPED_PAYLOAD_DELIMITER = ";"
NULL_PAYLOAD = "null"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# --- Envelopes ---------------------------------------------------------------


class RequestEnvelope(WireModel):
    type: str
    correlation_id: str
    payload: str = ""
    # Structured alternative to the `<accountId>;<json>` payload convention.
    account_id: str | None = None


class ResponseEnvelope(WireModel):
    correlation_id: str
    payload: str = NULL_PAYLOAD
    # Present only on error-tagged responses.
    error: str | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


# --- Request bodies ----------------------------------------------------------


class RegisterRequest(WireModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)


class LoginRequest(WireModel):
    email: str = Field(min_length=1, max_length=255)
    password: str


class UpdateProfileInfoRequest(WireModel):
    name: str = Field(min_length=1, max_length=255)


# Metric columns are 32-bit INTEGER.
MAX_METRIC_VALUE = 2**31 - 1


class UpdateProfileMetricsRequest(WireModel):
    height: int | None = Field(default=None, ge=0, le=MAX_METRIC_VALUE)
    weight: int | None = Field(default=None, ge=0, le=MAX_METRIC_VALUE)
    goal: str | None = Field(default=None, max_length=255)
    activity_level: str | None = Field(default=None, max_length=64)


class MetricsHistoryQuery(WireModel):
    field: MetricField | None = None
    changed_from: date | None = Field(default=None, alias="from")
    changed_to: date | None = Field(default=None, alias="to")


# --- Results -----------------------------------------------------------------


class AuthResponse(WireModel):
    token: str
    message: str
    correlation_id: str = ""


class ProfileInfo(WireModel):
    id: uuid.UUID
    email: str
    name: str
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> ProfileInfo:
        return cls(
            id=account.id, email=account.email, name=account.name, created_at=account.created_at
        )


class ProfileMetrics(WireModel):
    height: int | None
    weight: int | None
    goal: str | None
    activity_level: str | None

    @classmethod
    def from_account(cls, account: Account) -> ProfileMetrics:
        return cls(
            height=account.height,
            weight=account.weight,
            goal=account.goal,
            activity_level=account.activity_level,
        )


class Profile(WireModel):
    id: uuid.UUID
    email: str
    name: str
    height: int | None
    weight: int | None
    goal: str | None
    activity_level: str | None
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> Profile:
        return cls(
            id=account.id,
            email=account.email,
            name=account.name,
            height=account.height,
            weight=account.weight,
            goal=account.goal,
            activity_level=account.activity_level,
            created_at=account.created_at,
        )


class MetricsHistoryEntry(WireModel):
    id: uuid.UUID
    account_id: uuid.UUID
    field: MetricField
    old_value: int | None
    new_value: int | None
    changed_at: datetime

    @classmethod
    def from_record(cls, record: MetricsHistoryRecord) -> MetricsHistoryEntry:
        return cls(
            id=record.id,
            account_id=record.account_id,
            field=record.field_name,
            old_value=record.old_value,
            new_value=record.new_value,
            changed_at=record.changed_at,
        )


class ErrorPayload(WireModel):
    error: str
    message: str
    correlation_id: str


# --- Codec -------------------------------------------------------------------

M = TypeVar("M", bound=BaseModel)


def decode_request(raw: str | bytes) -> RequestEnvelope:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(f"request is not valid UTF-8: {e.reason}") from e
    try:
        return RequestEnvelope.model_validate_json(raw)
    except PydanticValidationError as e:
        raise ValidationError(f"malformed request envelope: {_summarize(e)}") from e


def decode_body(model: type[M], raw: str) -> M:
    # Empty bodies decode as `{}` so all-optional models (history query) accept them.
    try:
        return model.model_validate_json(raw.strip() or "{}")
    except PydanticValidationError as e:
        raise ValidationError(f"invalid {model.__name__} payload: {_summarize(e)}") from e


def split_scoped_payload(envelope: RequestEnvelope) -> tuple[uuid.UUID, str]:
    """
    Return (account id, json body) for an id-scoped request.

    `accountId` on the envelope wins; otherwise the payload is split on the
    first `;` only, and a payload without a delimiter is the bare account id.
    """

    if envelope.account_id is not None:
        raw_id, body = envelope.account_id, envelope.payload
    elif SCOPED_PAYLOAD_DELIMITER in envelope.payload:
        raw_id, body = envelope.payload.split(SCOPED_PAYLOAD_DELIMITER, 1)
    else:
        raw_id, body = envelope.payload, ""
    return parse_account_id(raw_id), body


def parse_account_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw.strip())
    except ValueError as e:
        raise ValidationError(f"invalid account id: {raw!r}") from e


def encode_result(result: BaseModel | list[BaseModel] | None) -> str:
    if result is None:
        return NULL_PAYLOAD
    if isinstance(result, list):
        return json.dumps([item.model_dump(mode="json", by_alias=True) for item in result])
    return result.model_dump_json(by_alias=True)


def extract_correlation_id(raw: str | bytes) -> str | None:
    """Best-effort correlation id recovery from a message that failed to decode."""

    try:
        data: Any = json.loads(raw)
    except ValueError:
        return None
    if isinstance(data, dict):
        value = data.get("correlationId")
        if isinstance(value, str) and value:
            return value
    return None


def _summarize(e: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
    )


# --- Module Notes -----------------------------------------------------------
# Field names on the wire are camelCase (`correlationId`, `activityLevel`, ...) to stay
# compatible with the gateway that produces requests and consumes responses.
