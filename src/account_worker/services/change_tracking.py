"""
account_worker.services.change_tracking

Change-tracking engine for body metrics.

Responsibilities:
- Compute field-level diffs between stored and submitted height/weight.
- Append one history row per changed field and apply the update to the
  account, all on the caller's session (one transaction).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from account_worker.db.models import Account, MetricField, MetricsHistoryRecord
from account_worker.db.repositories.metrics_history import MetricsHistoryRepo
from account_worker.messaging.schemas import UpdateProfileMetricsRequest

TRACKED_FIELDS: tuple[MetricField, ...] = (MetricField.height, MetricField.weight)


@dataclass(frozen=True, slots=True)
class MetricChange:
    field: MetricField
    old_value: int | None
    new_value: int


def compute_metric_changes(
    account: Account, update: UpdateProfileMetricsRequest
) -> list[MetricChange]:
    changes: list[MetricChange] = []
    for field in TRACKED_FIELDS:
        incoming = getattr(update, field.value)
        if incoming is None:
            continue
        stored = getattr(account, field.value)
        if stored is not None and stored == incoming:
            continue
        # First value for a field is recorded as a no-op transition (old == new).
        old_value = stored if stored is not None else incoming
        changes.append(MetricChange(field=field, old_value=old_value, new_value=incoming))
    return changes


async def apply_metrics_update(
    *,
    session: AsyncSession,
    account: Account,
    update: UpdateProfileMetricsRequest,
    changed_at: datetime,
) -> list[MetricsHistoryRecord]:
    history = MetricsHistoryRepo(session)
    records = [
        await history.add(
            account_id=account.id,
            field=change.field,
            old_value=change.old_value,
            new_value=change.new_value,
            changed_at=changed_at,
        )
        for change in compute_metric_changes(account, update)
    ]

    if update.height is not None:
        account.height = update.height
    if update.weight is not None:
        account.weight = update.weight
    if update.goal is not None:
        account.goal = update.goal
    if update.activity_level is not None:
        account.activity_level = update.activity_level
    await session.flush()
    return records


# --- Module Notes -----------------------------------------------------------
# Goal and activity level are applied but never historized.
