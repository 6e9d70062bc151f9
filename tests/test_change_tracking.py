"""
tests.test_change_tracking

Metric diffs and the history rows written alongside profile updates.
"""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select

from account_worker.db.models import Account, MetricField, MetricsHistoryRecord
from account_worker.db.repositories.accounts import AccountRepo
from account_worker.db.session import transaction
from account_worker.messaging.schemas import MetricsHistoryQuery, UpdateProfileMetricsRequest
from account_worker.services.change_tracking import (
    MetricChange,
    apply_metrics_update,
    compute_metric_changes,
)


def test_compute_changes_skips_equal_and_missing_values() -> None:
    account = Account(height=180, weight=None)
    changes = compute_metric_changes(account, UpdateProfileMetricsRequest(height=180))
    assert changes == []


def test_compute_changes_records_transition_and_first_value() -> None:
    account = Account(height=180, weight=None)
    changes = compute_metric_changes(
        account, UpdateProfileMetricsRequest(height=185, weight=80, goal="cut")
    )
    assert changes == [
        MetricChange(field=MetricField.height, old_value=180, new_value=185),
        MetricChange(field=MetricField.weight, old_value=80, new_value=80),
    ]


async def _create_account(sessions, **metrics) -> uuid.UUID:
    async with transaction(sessions) as session:
        account = await AccountRepo(session).create(email="m@x.com", password_hash="h", name="M")
        for key, value in metrics.items():
            setattr(account, key, value)
        return account.id


async def _history_count(sessions) -> int:
    async with transaction(sessions) as session:
        return (await session.execute(select(func.count(MetricsHistoryRecord.id)))).scalar_one()


@pytest.mark.asyncio
async def test_unchanged_height_writes_no_history(service, sessions) -> None:
    account_id = await _create_account(sessions, height=180)

    profile = await service.update_profile_metrics(
        account_id, UpdateProfileMetricsRequest(height=180)
    )

    assert profile is not None and profile.height == 180
    assert await _history_count(sessions) == 0


@pytest.mark.asyncio
async def test_changed_height_writes_one_row(service, sessions, clock) -> None:
    account_id = await _create_account(sessions, height=180)

    profile = await service.update_profile_metrics(
        account_id, UpdateProfileMetricsRequest(height=185, goal="bulk", activity_level="high")
    )

    assert profile is not None
    assert (profile.height, profile.goal, profile.activity_level) == (185, "bulk", "high")
    history = await service.get_metrics_history(account_id, MetricsHistoryQuery())
    assert len(history) == 1
    entry = history[0]
    assert (entry.field, entry.old_value, entry.new_value) == (MetricField.height, 180, 185)
    assert entry.changed_at == clock.now
    assert entry.account_id == account_id


@pytest.mark.asyncio
async def test_goal_only_update_is_not_historized(service, sessions) -> None:
    account_id = await _create_account(sessions, height=180, weight=75)

    profile = await service.update_profile_metrics(
        account_id, UpdateProfileMetricsRequest(goal="maintain")
    )

    assert profile is not None and profile.goal == "maintain"
    assert (profile.height, profile.weight) == (180, 75)
    assert await _history_count(sessions) == 0


@pytest.mark.asyncio
async def test_history_and_state_roll_back_together(sessions, clock) -> None:
    account_id = await _create_account(sessions, height=180)

    with pytest.raises(RuntimeError):
        async with transaction(sessions) as session:
            account = await AccountRepo(session).get(account_id)
            await apply_metrics_update(
                session=session,
                account=account,
                update=UpdateProfileMetricsRequest(height=190, weight=90),
                changed_at=clock.now,
            )
            raise RuntimeError("boom after writes")

    assert await _history_count(sessions) == 0
    async with transaction(sessions) as session:
        account = await AccountRepo(session).get(account_id)
        assert (account.height, account.weight) == (180, None)
