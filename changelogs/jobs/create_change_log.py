"""Deferred task persisting one change log entry."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from changelogs.exceptions import DeferredTaskError
from changelogs.jobs.queue import Task
from changelogs.schemas.change_log import ChangeLogEntry
from changelogs.storage.base import ChangeLogStore

logger = logging.getLogger(__name__)


class CreateChangeLogTask(Task):
    """Writes an already enriched entry to the store."""

    name = "create_change_log"

    def __init__(
        self,
        store: ChangeLogStore,
        entry: ChangeLogEntry,
        *,
        max_attempts: int = 3,
        timeout: float = 30.0,
        backoff: float = 1.0,
    ) -> None:
        self.store = store
        self.entry = entry
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.backoff = backoff

    async def handle(self) -> ChangeLogEntry:
        # Stamped per attempt so the row reflects when it was actually written;
        # occurred_date keeps the day the change happened.
        entry = self.entry.model_copy(update={"created_at": datetime.now(UTC)})
        return await self.store.create(entry)

    async def failed(self, error: DeferredTaskError) -> None:
        logger.error(
            "Failed to create change log after %d attempt(s): %s (data=%s)",
            error.attempts,
            error.cause,
            self.entry.payload(),
        )
