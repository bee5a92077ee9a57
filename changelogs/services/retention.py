"""Change log retention — deletes entries past the retention horizon.

`cleanup()` is the scheduled sweep and honours CHANGE_LOGS_CLEANUP_ENABLED
unless forced. The date-range primitives are explicit operator actions and
always run.

The cutoff compares `occurred_date`, not `created_at`. An entry inserted at
the boundary while a sweep is running may or may not be removed by that
sweep; the next run picks it up.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from changelogs.config import ChangeLogSettings
from changelogs.config import settings as default_settings
from changelogs.storage.base import ChangeLogStore

logger = logging.getLogger(__name__)


class RetentionService:
    """Age-based and date-range deletion of change log entries."""

    def __init__(self, store: ChangeLogStore, settings: ChangeLogSettings | None = None) -> None:
        self.store = store
        self.settings = settings or default_settings

    def cutoff_date(self, days: int | None = None, today: date | None = None) -> date:
        """First day that is kept: ``today - days``."""
        days = self.settings.cleanup.days if days is None else days
        return (today or date.today()) - timedelta(days=days)

    async def cleanup(self, days: int | None = None, *, force: bool = False) -> int:
        """Delete entries older than ``days`` (default from settings).

        Returns 0 without touching the store when retention is disabled and
        ``force`` is not set. Safe to run repeatedly.
        """
        if not self.settings.cleanup.enabled and not force:
            logger.info("Change log cleanup skipped: retention disabled")
            return 0

        days = self.settings.cleanup.days if days is None else days
        cutoff = self.cutoff_date(days)
        deleted = await self.store.delete_before(cutoff)

        logger.info(
            "Change logs cleanup completed: days=%d cutoff=%s deleted=%d",
            days,
            cutoff,
            deleted,
        )
        return deleted

    async def cleanup_by_date_range(self, start: date, end: date) -> int:
        """Delete entries that occurred within [start, end]."""
        deleted = await self.store.delete_between(start, end)
        logger.info("Deleted %d change logs between %s and %s", deleted, start, end)
        return deleted

    async def cleanup_before_date(self, cutoff: date) -> int:
        """Delete entries that occurred strictly before ``cutoff``."""
        deleted = await self.store.delete_before(cutoff)
        logger.info("Deleted %d change logs before %s", deleted, cutoff)
        return deleted
