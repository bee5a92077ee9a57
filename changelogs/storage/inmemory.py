"""In-memory implementation of ChangeLogStore.

Used by tests and by embedded deployments without PostgreSQL. Filtering goes
through ChangeLogFilters.matches so results agree with the SQL store.
"""

from __future__ import annotations

from collections import Counter
from datetime import date

from changelogs.schemas.change_log import ChangeLogEntry, ChangeLogFilters
from changelogs.storage.base import ChangeLogStore


class InMemoryChangeLogStore(ChangeLogStore):
    """Keeps entries in insertion order in a plain list."""

    def __init__(self) -> None:
        self._entries: list[ChangeLogEntry] = []

    @property
    def entries(self) -> list[ChangeLogEntry]:
        """All stored entries, oldest first."""
        return list(self._entries)

    async def create(self, entry: ChangeLogEntry) -> ChangeLogEntry:
        self._entries.append(entry)
        return entry

    async def query(
        self,
        filters: ChangeLogFilters,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ChangeLogEntry]:
        matching = self._matching(filters)
        # Insertion order breaks created_at ties so the newest insert comes first
        ordered = [
            entry
            for _, entry in sorted(
                enumerate(matching),
                key=lambda pair: (pair[1].created_at, pair[0]),
                reverse=True,
            )
        ]
        end = None if limit is None else offset + limit
        return ordered[offset:end]

    async def count(self, filters: ChangeLogFilters) -> int:
        return len(self._matching(filters))

    async def count_by_action(self, filters: ChangeLogFilters) -> dict[str, int]:
        return dict(Counter(entry.action.value for entry in self._matching(filters)))

    async def count_by_actor(self, filters: ChangeLogFilters) -> dict[str, int]:
        return dict(
            Counter(entry.actor_id for entry in self._matching(filters) if entry.actor_id is not None)
        )

    async def delete_before(self, cutoff: date) -> int:
        return self._delete_where(lambda entry: entry.occurred_date < cutoff)

    async def delete_between(self, start: date, end: date) -> int:
        return self._delete_where(lambda entry: start <= entry.occurred_date <= end)

    def _matching(self, filters: ChangeLogFilters) -> list[ChangeLogEntry]:
        return [entry for entry in self._entries if filters.matches(entry)]

    def _delete_where(self, predicate) -> int:
        kept = [entry for entry in self._entries if not predicate(entry)]
        deleted = len(self._entries) - len(kept)
        self._entries = kept
        return deleted
