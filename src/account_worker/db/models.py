"""
account_worker.db.models

Persistence schema for the account worker.

Responsibilities:
- Define ORM models:
  - Account: identity, credentials and current body metrics
  - MetricsHistoryRecord: append-only ledger of height/weight transitions
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from account_worker.db.base import Base


def utcnow() -> datetime:
    # Persist naive UTC timestamps; history date filters compare against naive bounds.
    return datetime.now(UTC).replace(tzinfo=None)


class MetricField(enum.StrEnum):
    # Only these metrics are historized; goal/activity level are not.
    height = "height"
    weight = "weight"


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Unique index is the final arbiter for concurrent registrations.
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight: Mapped[int | None] = mapped_column(Integer, nullable=True)
    goal: Mapped[str | None] = mapped_column(String(255), nullable=True)
    activity_level: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)


class MetricsHistoryRecord(Base):
    __tablename__ = "metrics_history"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("accounts.id"), nullable=False, index=True
    )

    field_name: Mapped[MetricField] = mapped_column(Enum(MetricField), nullable=False)
    old_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    new_value: Mapped[int | None] = mapped_column(Integer, nullable=True)

    changed_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    __table_args__ = (Index("ix_metrics_history_account_changed", "account_id", "changed_at"),)


# --- Module Notes -----------------------------------------------------------
# History rows are never updated or deleted; the repository only exposes append and query.
