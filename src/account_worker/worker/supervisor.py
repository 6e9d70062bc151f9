"""Restart a long-running coroutine with exponential backoff when it crashes."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from account_worker.observability.logging import get_logger

log = get_logger(__name__)


async def supervise(
    run: Callable[[], Awaitable[None]],
    *,
    name: str,
    initial_backoff: float = 1.0,
    max_backoff: float = 30.0,
    healthy_after: float = 60.0,
    max_restarts: int | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    monotonic: Callable[[], float] = time.monotonic,
) -> None:
    """
    Run `run()` until it returns normally or the task is cancelled.

    Any other exception is logged and `run()` is started again after a delay that
    doubles on each consecutive crash, capped at `max_backoff`. A run that stayed
    up for at least `healthy_after` seconds resets the delay to `initial_backoff`.
    With `max_restarts` set, the crash after the last allowed restart is re-raised.
    """

    backoff = initial_backoff
    restarts = 0
    while True:
        started = monotonic()
        try:
            await run()
        except asyncio.CancelledError:
            raise
        except Exception:
            if max_restarts is not None and restarts >= max_restarts:
                log.exception("task_gave_up", task=name, restarts=restarts)
                raise
            if monotonic() - started >= healthy_after:
                backoff = initial_backoff
            restarts += 1
            log.exception("task_crashed", task=name, restart_in=backoff, restarts=restarts)
            await sleep(backoff)
            backoff = min(backoff * 2, max_backoff)
            continue
        log.info("task_finished", task=name, restarts=restarts)
        return
