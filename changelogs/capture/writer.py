"""Log store writer — synchronous or deferred persistence of entries.

Synchronous mode writes inside the caller's operation and lets store errors
propagate. Deferred mode hands the entry to the task queue and returns at
once; a write that keeps failing is logged by the task and never reaches the
code that triggered the change.
"""

from __future__ import annotations

import logging

from changelogs.config import ChangeLogSettings
from changelogs.config import settings as default_settings
from changelogs.jobs.create_change_log import CreateChangeLogTask
from changelogs.jobs.queue import TaskHandle, TaskQueue, task_queue
from changelogs.schemas.change_log import ChangeLogEntry
from changelogs.storage.base import ChangeLogStore

logger = logging.getLogger(__name__)


class ChangeLogWriter:
    """Persists enriched entries according to the queue settings."""

    def __init__(
        self,
        store: ChangeLogStore,
        settings: ChangeLogSettings | None = None,
        queue: TaskQueue | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or default_settings
        self.queue = queue or task_queue

    @property
    def deferred(self) -> bool:
        return self.settings.queue.enabled

    async def persist(self, entry: ChangeLogEntry) -> TaskHandle | None:
        """Store ``entry``; returns the task handle in deferred mode."""
        if not self.deferred:
            await self.store.create(entry)
            return None

        queue_settings = self.settings.queue
        task = CreateChangeLogTask(
            self.store,
            entry,
            max_attempts=queue_settings.max_attempts,
            timeout=queue_settings.timeout,
            backoff=queue_settings.backoff,
        )
        handle = await self.queue.submit(task, channel=queue_settings.name)
        logger.debug("Change log %s queued on %s", entry.id, queue_settings.name)
        return handle
