"""
account_worker.db.repositories.metrics_history

Repository for `MetricsHistoryRecord` entities.

Responsibilities:
- Append history rows (height/weight transitions).
- Query the ledger for one account with optional field and time-window filters.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from account_worker.db.models import MetricField, MetricsHistoryRecord


class MetricsHistoryRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        account_id: uuid.UUID,
        field: MetricField,
        old_value: int | None,
        new_value: int | None,
        changed_at: datetime,
    ) -> MetricsHistoryRecord:
        # Append-only: there is no update/delete counterpart.
        record = MetricsHistoryRecord(
            account_id=account_id,
            field_name=field,
            old_value=old_value,
            new_value=new_value,
            changed_at=changed_at,
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def list_for_account(
        self,
        account_id: uuid.UUID,
        *,
        field: MetricField | None = None,
        changed_from: datetime | None = None,
        changed_to: datetime | None = None,
    ) -> list[MetricsHistoryRecord]:
        stmt = select(MetricsHistoryRecord).where(MetricsHistoryRecord.account_id == account_id)
        if field is not None:
            stmt = stmt.where(MetricsHistoryRecord.field_name == field)
        if changed_from is not None:
            stmt = stmt.where(MetricsHistoryRecord.changed_at >= changed_from)
        if changed_to is not None:
            stmt = stmt.where(MetricsHistoryRecord.changed_at <= changed_to)
        # Newest first; id breaks ties between rows written by the same update.
        stmt = stmt.order_by(desc(MetricsHistoryRecord.changed_at), desc(MetricsHistoryRecord.id))
        return list((await self._session.execute(stmt)).scalars().all())


# --- Module Notes -----------------------------------------------------------
# Served by `ix_metrics_history_account_changed`; keep filters on (account_id, changed_at).
