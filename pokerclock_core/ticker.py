"""Scoped one-second tick source for a clock view.

One asyncio task per view calls controller.tick() on a fixed cadence while
the clock is running. The task only exists inside ``run_ticker``; leaving the
block for any reason (normal exit, exception, cancellation) cancels it and
waits for it, so a view can never leave an orphaned ticker behind.

Sleeps are scheduled against the loop's monotonic clock (target time, not a
plain fixed sleep) so a slow tick handler does not make the clock drift.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator

from .clock import ClockConfig
from .controller import ClockController

logger = logging.getLogger(__name__)


async def _tick_loop(controller: ClockController, interval: float) -> None:
    loop = asyncio.get_running_loop()
    next_at = loop.time() + interval
    while True:
        await asyncio.sleep(max(0.0, next_at - loop.time()))
        next_at += interval
        if controller.is_running:
            controller.tick()
        elif loop.time() > next_at + interval:
            # Resync after a long stall so paused time is not replayed as a burst.
            next_at = loop.time() + interval


def _log_tick_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.exception("Ticker stopped: tick raised", exc_info=exc)


@contextlib.asynccontextmanager
async def run_ticker(
    controller: ClockController,
    interval: float = ClockConfig.TICK_INTERVAL_SECONDS,
) -> AsyncIterator[asyncio.Task]:
    """Tick ``controller`` every ``interval`` seconds for the duration of the block.

    Yields the underlying task. An exception raised by a tick (e.g. from a
    hook) ends the task, is logged right away and is re-raised when the block
    exits.
    """
    if interval <= 0:
        raise ValueError("interval must be positive")
    task = asyncio.create_task(_tick_loop(controller, interval), name="pokerclock-ticker")
    task.add_done_callback(_log_tick_failure)
    logger.debug(f"Ticker started (interval={interval}s)")
    try:
        yield task
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("Ticker stopped")
