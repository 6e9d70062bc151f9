from __future__ import annotations

import asyncio

import pytest

from account_worker.worker.supervisor import supervise


@pytest.mark.asyncio
async def test_restarts_with_capped_exponential_backoff() -> None:
    calls = 0
    delays: list[float] = []

    async def flaky() -> None:
        nonlocal calls
        calls += 1
        if calls < 5:
            raise ConnectionError("broker went away")

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    await supervise(flaky, name="t", initial_backoff=1.0, max_backoff=4.0, sleep=fake_sleep)

    assert calls == 5
    assert delays == [1.0, 2.0, 4.0, 4.0]


@pytest.mark.asyncio
async def test_gives_up_after_max_restarts() -> None:
    async def always_fails() -> None:
        raise RuntimeError("nope")

    async def no_sleep(delay: float) -> None:
        return None

    with pytest.raises(RuntimeError):
        await supervise(always_fails, name="t", max_restarts=2, sleep=no_sleep)


@pytest.mark.asyncio
async def test_cancellation_is_not_treated_as_a_crash() -> None:
    started = asyncio.Event()

    async def forever() -> None:
        started.set()
        await asyncio.Event().wait()

    task = asyncio.create_task(supervise(forever, name="t"))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_backoff_resets_after_a_healthy_run() -> None:
    now = 0.0
    calls = 0
    delays: list[float] = []

    async def flaky() -> None:
        nonlocal calls, now
        calls += 1
        if calls == 3:
            # Third run serves traffic for a while before failing.
            now += 120.0
        if calls < 5:
            raise ConnectionError("broker went away")

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    await supervise(
        flaky,
        name="t",
        initial_backoff=1.0,
        max_backoff=30.0,
        healthy_after=60.0,
        sleep=fake_sleep,
        monotonic=lambda: now,
    )

    assert calls == 5
    assert delays == [1.0, 2.0, 1.0, 2.0]
