"""In-process deferred task queue with retries.

Tasks are submitted to a named channel and executed by one background worker
per channel, so the submitter never waits for the work itself. Each task
carries its own retry and timeout policy.

Usage:
    # Submit from anywhere inside the event loop:
    from changelogs.jobs.queue import task_queue

    handle = await task_queue.submit(MyTask(...), channel="audit")

    # At shutdown, drain pending work:
    await task_queue.stop()
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from changelogs.exceptions import DeferredTaskError

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Task(ABC):
    """Unit of deferred work.

    Subclasses implement `handle()`; `failed()` runs once after the last
    attempt fails. Delays between attempts grow exponentially from `backoff`.
    """

    name: str = "task"
    max_attempts: int = 3
    timeout: float = 30.0
    backoff: float = 1.0

    @abstractmethod
    async def handle(self) -> Any:
        """Do the work. Raising schedules another attempt."""

    async def failed(self, error: DeferredTaskError) -> None:
        """Called when every attempt has failed."""
        logger.error("%s", error)

    def retry_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        return self.backoff * (2 ** (attempt - 1))


@dataclass
class TaskHandle:
    """Tracks one submitted task."""

    task: Task
    channel: str
    status: TaskStatus = TaskStatus.PENDING
    attempts: int = 0
    result: Any = None
    error: DeferredTaskError | None = None
    _done: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def done(self) -> bool:
        return self._done.is_set()

    async def wait(self, timeout: float | None = None) -> TaskStatus:
        """Wait until the task succeeded or failed for good."""
        await asyncio.wait_for(self._done.wait(), timeout)
        return self.status

    def _finish(self, status: TaskStatus) -> None:
        self.status = status
        self._done.set()


class TaskQueue:
    """Named channels, each drained by its own background worker."""

    def __init__(self) -> None:
        self._queues: dict[str, asyncio.Queue[TaskHandle]] = {}
        self._workers: dict[str, asyncio.Task[None]] = {}

    # ── Public API ───────────────────────────────────────────────────

    async def submit(self, task: Task, channel: str = "default") -> TaskHandle:
        """Queue ``task`` on ``channel`` and return immediately."""
        handle = TaskHandle(task=task, channel=channel)
        queue = self._queues.get(channel)
        if queue is None:
            queue = self._queues[channel] = asyncio.Queue()
        self._ensure_worker(channel)

        await queue.put(handle)
        logger.debug("Task submitted: %s (channel=%s)", task.name, channel)
        return handle

    async def stop(self) -> None:
        """Drain every channel, then stop the workers."""
        for queue in self._queues.values():
            await queue.join()

        for worker in self._workers.values():
            if not worker.done():
                worker.cancel()
                try:
                    await worker
                except asyncio.CancelledError:
                    pass

        self._workers.clear()
        self._queues.clear()
        logger.info("Task queue stopped")

    @property
    def channels(self) -> list[str]:
        return list(self._queues)

    # ── Background workers ───────────────────────────────────────────

    def _ensure_worker(self, channel: str) -> None:
        """Start the channel worker if not already running."""
        worker = self._workers.get(channel)
        if worker is None or worker.done():
            self._workers[channel] = asyncio.create_task(self._worker(channel))
            logger.info("Task worker started (channel=%s)", channel)

    async def _worker(self, channel: str) -> None:
        """Drain one channel forever."""
        queue = self._queues[channel]
        while True:
            try:
                handle = await queue.get()
            except asyncio.CancelledError:
                logger.info("Task worker shutting down (channel=%s)", channel)
                break
            try:
                await self._execute(handle)
            except asyncio.CancelledError:
                queue.task_done()
                raise
            except Exception:
                logger.exception("Error in task worker (channel=%s)", channel)
            queue.task_done()

    async def _execute(self, handle: TaskHandle) -> None:
        """Run a task until it succeeds or runs out of attempts."""
        task = handle.task
        handle.status = TaskStatus.RUNNING

        while True:
            handle.attempts += 1
            try:
                handle.result = await asyncio.wait_for(task.handle(), task.timeout)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if handle.attempts >= task.max_attempts:
                    handle.error = DeferredTaskError(task.name, handle.attempts, e)
                    handle._finish(TaskStatus.FAILED)
                    try:
                        await task.failed(handle.error)
                    except Exception:
                        logger.exception("Failure hook of task %s raised", task.name)
                    return

                delay = task.retry_delay(handle.attempts)
                logger.warning(
                    "Task %s attempt %d/%d failed: %s (retrying in %.1fs)",
                    task.name,
                    handle.attempts,
                    task.max_attempts,
                    e,
                    delay,
                )
                await asyncio.sleep(delay)
            else:
                handle._finish(TaskStatus.SUCCEEDED)
                return


# Module-level singleton — shared by the writer and the application lifespan.
task_queue = TaskQueue()
