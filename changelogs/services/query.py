"""Query and statistics over the change log.

Stateless service — the store is injected once and every call applies its
filters independently.
"""

from __future__ import annotations

import logging

from changelogs.capture.loggable import LoggableMixin
from changelogs.config import ChangeLogSettings
from changelogs.config import settings as default_settings
from changelogs.models.enums import RecordAction
from changelogs.schemas.change_log import (
    ChangeLogEntry,
    ChangeLogFilters,
    ChangeLogStatistics,
)
from changelogs.storage.base import ChangeLogStore

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10


class ChangeLogQueryService:
    """Filters, pages and aggregates stored entries."""

    def __init__(self, store: ChangeLogStore, settings: ChangeLogSettings | None = None) -> None:
        self.store = store
        self.settings = settings or default_settings

    async def query(
        self,
        filters: ChangeLogFilters | None = None,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ChangeLogEntry]:
        """Matching entries, newest first."""
        return await self.store.query(filters or ChangeLogFilters(), limit=limit, offset=offset)

    async def paginate(
        self,
        filters: ChangeLogFilters | None = None,
        page: int = 1,
        per_page: int | None = None,
    ) -> tuple[list[ChangeLogEntry], int]:
        """One page of matching entries plus the total match count."""
        filters = filters or ChangeLogFilters()
        per_page = per_page or self.settings.limit
        page = max(page, 1)

        total = await self.store.count(filters)
        entries = await self.store.query(filters, limit=per_page, offset=(page - 1) * per_page)
        return entries, total

    async def statistics(self, filters: ChangeLogFilters | None = None) -> ChangeLogStatistics:
        """Total, per-action and per-actor counts plus the 10 latest entries.

        All four figures are computed with the same filters object, so they
        describe the same set of entries.
        """
        filters = filters or ChangeLogFilters()
        return ChangeLogStatistics(
            total=await self.store.count(filters),
            by_action=await self.store.count_by_action(filters),
            by_actor=await self.store.count_by_actor(filters),
            recent=await self.store.query(filters, limit=RECENT_LIMIT),
        )

    # ── Subject helpers ──────────────────────────────────────────────

    @staticmethod
    def subject_filters(entity: LoggableMixin) -> ChangeLogFilters:
        """Filters selecting every entry of one entity."""
        return ChangeLogFilters(
            subject_type=entity.change_log_subject_type(),
            subject_id=entity.change_log_key(),
        )

    async def for_subject(self, entity: LoggableMixin) -> list[ChangeLogEntry]:
        return await self.query(self.subject_filters(entity))

    async def for_subject_by_action(
        self,
        entity: LoggableMixin,
        action: RecordAction | str,
    ) -> list[ChangeLogEntry]:
        return await self.query(self.subject_filters(entity).merge(action=action))

    async def for_subject_by_actor(self, entity: LoggableMixin, actor_id: str) -> list[ChangeLogEntry]:
        return await self.query(self.subject_filters(entity).merge(actor_id=actor_id))

    async def for_subject_field(self, entity: LoggableMixin, field_name: str) -> list[ChangeLogEntry]:
        """Per-field entries of one attribute (granular mode only)."""
        return await self.query(self.subject_filters(entity).merge(field_name=field_name))

    async def recent_for_subject(
        self,
        entity: LoggableMixin,
        limit: int | None = None,
    ) -> list[ChangeLogEntry]:
        return await self.query(self.subject_filters(entity), limit=limit or self.settings.limit)

    async def has_change_logs(self, entity: LoggableMixin) -> bool:
        return await self.store.count(self.subject_filters(entity)) > 0

    async def last_change_log(self, entity: LoggableMixin) -> ChangeLogEntry | None:
        entries = await self.query(self.subject_filters(entity), limit=1)
        return entries[0] if entries else None
