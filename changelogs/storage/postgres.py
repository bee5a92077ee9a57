"""PostgreSQL implementation of ChangeLogStore (SQLAlchemy async ORM).

Each method opens its own session from the factory and commits before
returning, so every write is one independent statement. SQLAlchemy errors
are wrapped in ChangeLogStoreError.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy import Select, and_, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from changelogs.db.engine import async_session_factory
from changelogs.exceptions import ChangeLogStoreError
from changelogs.models.change_log import ChangeLog
from changelogs.schemas.change_log import ChangeLogEntry, ChangeLogFilters
from changelogs.storage.base import ChangeLogStore

logger = logging.getLogger(__name__)


def apply_filters(stmt: Select[Any], filters: ChangeLogFilters) -> Select[Any]:
    """Add a WHERE clause for every set filter."""
    conditions = []
    if filters.subject_type is not None:
        conditions.append(ChangeLog.subject_type == filters.subject_type)
    if filters.subject_id is not None:
        conditions.append(ChangeLog.subject_id == filters.subject_id)
    if filters.action is not None:
        conditions.append(ChangeLog.action == filters.action)
    if filters.actor_id is not None:
        conditions.append(ChangeLog.actor_id == filters.actor_id)
    if filters.start_date is not None:
        conditions.append(ChangeLog.occurred_date >= filters.start_date)
    if filters.end_date is not None:
        conditions.append(ChangeLog.occurred_date <= filters.end_date)
    if filters.tag is not None:
        conditions.append(ChangeLog.tags.contains([filters.tag]))
    if filters.field_name is not None:
        conditions.append(ChangeLog.field_name == filters.field_name)

    if conditions:
        stmt = stmt.where(and_(*conditions))
    return stmt


def _to_row(entry: ChangeLogEntry) -> ChangeLog:
    return ChangeLog(
        id=entry.id,
        subject_type=entry.subject_type,
        subject_id=entry.subject_id,
        action=entry.action.value,
        field_name=entry.field_name,
        old_value=entry.old_value,
        new_value=entry.new_value,
        actor_id=entry.actor_id,
        ip_address=entry.ip_address,
        user_agent=entry.user_agent,
        method=entry.method,
        endpoint=entry.endpoint,
        description=entry.description,
        tags=list(entry.tags),
        occurred_date=entry.occurred_date,
        created_at=entry.created_at,
        updated_at=entry.created_at,
    )


class PostgresChangeLogStore(ChangeLogStore):
    """Stores entries in the ``change_logs`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or async_session_factory

    async def create(self, entry: ChangeLogEntry) -> ChangeLogEntry:
        try:
            async with self._session_factory() as db:
                db.add(_to_row(entry))
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to persist change log %s: %s", entry.id, e)
            msg = f"Failed to persist change log {entry.id}: {e}"
            raise ChangeLogStoreError(msg) from e

        logger.debug(
            "Change log saved: %s %s#%s",
            entry.action.value,
            entry.subject_type,
            entry.subject_id,
        )
        return entry

    async def query(
        self,
        filters: ChangeLogFilters,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ChangeLogEntry]:
        stmt = apply_filters(select(ChangeLog), filters).order_by(ChangeLog.created_at.desc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self._session_factory() as db:
                result = await db.execute(stmt)
                rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            msg = f"Failed to query change logs: {e}"
            raise ChangeLogStoreError(msg) from e

        return [ChangeLogEntry.model_validate(row) for row in rows]

    async def count(self, filters: ChangeLogFilters) -> int:
        stmt = apply_filters(select(func.count(ChangeLog.id)), filters)
        try:
            async with self._session_factory() as db:
                result = await db.execute(stmt)
                return result.scalar() or 0
        except SQLAlchemyError as e:
            msg = f"Failed to count change logs: {e}"
            raise ChangeLogStoreError(msg) from e

    async def count_by_action(self, filters: ChangeLogFilters) -> dict[str, int]:
        stmt = apply_filters(
            select(ChangeLog.action, func.count(ChangeLog.id)),
            filters,
        ).group_by(ChangeLog.action)
        return await self._grouped(stmt)

    async def count_by_actor(self, filters: ChangeLogFilters) -> dict[str, int]:
        stmt = (
            apply_filters(select(ChangeLog.actor_id, func.count(ChangeLog.id)), filters)
            .where(ChangeLog.actor_id.isnot(None))
            .group_by(ChangeLog.actor_id)
        )
        return await self._grouped(stmt)

    async def delete_before(self, cutoff: date) -> int:
        return await self._delete(delete(ChangeLog).where(ChangeLog.occurred_date < cutoff))

    async def delete_between(self, start: date, end: date) -> int:
        return await self._delete(
            delete(ChangeLog).where(ChangeLog.occurred_date.between(start, end))
        )

    async def _grouped(self, stmt: Select[Any]) -> dict[str, int]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(stmt)
                return {key: count for key, count in result.all()}
        except SQLAlchemyError as e:
            msg = f"Failed to aggregate change logs: {e}"
            raise ChangeLogStoreError(msg) from e

    async def _delete(self, stmt: Any) -> int:
        try:
            async with self._session_factory() as db:
                result = await db.execute(stmt)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to delete change logs: %s", e)
            msg = f"Failed to delete change logs: {e}"
            raise ChangeLogStoreError(msg) from e
        return result.rowcount  # type: ignore[attr-defined]
