# src/daily_tracker/tasks/task_scheduler.py

from __future__ import annotations

"""
Rollover scheduler.

An optional polling loop that calls TaskService.check_rollover() so the
daily reset lands close to midnight even without traffic. It is only an
extra trigger: every request still evaluates the rollover lazily, and the
check is idempotent within a day.
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class RolloverTarget(Protocol):
    def check_rollover(self) -> bool: ...


async def run_rollover_scheduler(
        service: RolloverTarget,
        *,
        interval_seconds: float = 60.0,
) -> None:
    """
    Simple polling scheduler.

    Every interval_seconds:
    - run the rollover check in a worker thread (store I/O is blocking)
    - log when a reset happened
    - on failure, log and try again on the next tick

    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        try:
            if await asyncio.to_thread(service.check_rollover):
                logger.info("Scheduled rollover check performed a daily reset.")
        except Exception:
            logger.exception("check_rollover failed")

        await asyncio.sleep(sleep_s)


@dataclass
class RolloverBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    task: asyncio.Task

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.task.cancel)
        except Exception:
            logger.debug("Failed to signal rollover scheduler stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_rollover_in_background(
    service: RolloverTarget, *, interval_seconds: float
) -> RolloverBackgroundRunner | None:
    """
    Start the scheduler in a daemon thread with its own event loop
    (the console REPL and the HTTP server both block the main thread).
    """
    if interval_seconds <= 0:
        logger.info("Rollover scheduler disabled (interval=%s).", interval_seconds)
        return None

    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        task = loop.create_task(run_rollover_scheduler(service, interval_seconds=interval_seconds))

        holder["loop"] = loop
        holder["task"] = task
        ready.set()

        try:
            with contextlib.suppress(asyncio.CancelledError):
                loop.run_until_complete(task)
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="rollover-scheduler", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    task = holder.get("task")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(task, asyncio.Task):
        logger.error("Rollover scheduler thread did not initialize properly.")
        return None

    logger.info("Rollover scheduler started (interval=%ss).", interval_seconds)
    return RolloverBackgroundRunner(thread=t, loop=loop, task=task)
