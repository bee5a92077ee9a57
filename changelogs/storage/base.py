"""ChangeLogStore abstract interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from changelogs.schemas.change_log import ChangeLogEntry, ChangeLogFilters


class ChangeLogStore(ABC):
    """Abstract interface for change log storage.

    Every write is a single insert or a single bulk delete; atomicity of each
    statement is the backend's responsibility. All read and aggregate methods
    share one filter semantics, defined by ChangeLogFilters.
    """

    @abstractmethod
    async def create(self, entry: ChangeLogEntry) -> ChangeLogEntry:
        """Persist a new entry and return it."""
        pass

    @abstractmethod
    async def query(
        self,
        filters: ChangeLogFilters,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ChangeLogEntry]:
        """List matching entries, newest first by created_at."""
        pass

    @abstractmethod
    async def count(self, filters: ChangeLogFilters) -> int:
        """Number of matching entries."""
        pass

    @abstractmethod
    async def count_by_action(self, filters: ChangeLogFilters) -> dict[str, int]:
        """Matching entries grouped by action value."""
        pass

    @abstractmethod
    async def count_by_actor(self, filters: ChangeLogFilters) -> dict[str, int]:
        """Matching entries grouped by actor id (entries without actor excluded)."""
        pass

    @abstractmethod
    async def delete_before(self, cutoff: date) -> int:
        """Delete entries whose occurred_date is strictly before ``cutoff``."""
        pass

    @abstractmethod
    async def delete_between(self, start: date, end: date) -> int:
        """Delete entries whose occurred_date is within [start, end]."""
        pass
