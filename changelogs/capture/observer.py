"""ChangeLogObserver — explicit instrumentation calls for audited mutations.

Call the matching method right after each mutation of a loggable entity:

    session.add(post)
    await session.flush()
    await observer.created(post)

    post.title = "New title"
    await observer.updated(post)

The observer owns gating: the global kill switch, the per-action enable map,
temporary suppression via `without_change_logs()`, and the entity's own
`should_log_changes` veto. When an event is logged it re-syncs the entity's
original snapshot *after* capture, so old values of the next update are
relative to this one.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator, Mapping
from contextvars import ContextVar
from typing import Any

from changelogs.capture.engine import ChangeCaptureEngine
from changelogs.capture.loggable import LoggableMixin
from changelogs.config import ChangeLogSettings
from changelogs.config import settings as default_settings
from changelogs.models.enums import RecordAction
from changelogs.schemas.change_log import ChangeLogEntry

logger = logging.getLogger(__name__)

_suppressed: ContextVar[bool] = ContextVar("change_logs_suppressed", default=False)


@contextlib.contextmanager
def without_change_logs() -> Iterator[None]:
    """Disable change logging in the current context (e.g. bulk imports)."""
    token = _suppressed.set(True)
    try:
        yield
    finally:
        _suppressed.reset(token)


def change_logs_suppressed() -> bool:
    return _suppressed.get()


class ChangeLogObserver:
    """Gates lifecycle events and forwards them to the capture engine."""

    def __init__(self, engine: ChangeCaptureEngine, settings: ChangeLogSettings | None = None) -> None:
        self.engine = engine
        self.settings = settings or default_settings

    def should_log(self, entity: LoggableMixin, action: RecordAction) -> bool:
        """Check global switch, per-action map, suppression and entity veto."""
        if not self.settings.enabled:
            return False
        if not self.settings.actions.is_enabled(action):
            return False
        if change_logs_suppressed():
            return False
        return entity.should_log_changes(action)

    async def created(self, entity: LoggableMixin) -> ChangeLogEntry | None:
        if not self.should_log(entity, RecordAction.CREATE):
            entity.sync_change_log_original()
            return None
        entry = await self.engine.capture_create(entity)
        entity.sync_change_log_original()
        return entry

    async def updated(
        self,
        entity: LoggableMixin,
        changes: Mapping[str, Any] | None = None,
    ) -> list[ChangeLogEntry]:
        """Log an update; ``changes`` defaults to the entity's dirty fields."""
        if not self.should_log(entity, RecordAction.UPDATE):
            entity.sync_change_log_original()
            return []

        if changes is None:
            changes = entity.change_log_dirty()
        if not changes:
            return []

        entries = await self.engine.capture_update(entity, changes)
        entity.sync_change_log_original()
        return entries

    async def deleted(self, entity: LoggableMixin) -> ChangeLogEntry | None:
        """Log a (soft) delete."""
        return await self._delete(entity, permanent=False)

    async def force_deleted(self, entity: LoggableMixin) -> ChangeLogEntry | None:
        """Log a permanent delete."""
        return await self._delete(entity, permanent=True)

    async def restored(self, entity: LoggableMixin) -> ChangeLogEntry | None:
        if not self.should_log(entity, RecordAction.RESTORE):
            entity.sync_change_log_original()
            return None
        entry = await self.engine.capture_restore(entity)
        entity.sync_change_log_original()
        return entry

    async def _delete(self, entity: LoggableMixin, *, permanent: bool) -> ChangeLogEntry | None:
        if not self.should_log(entity, RecordAction.DELETE):
            return None
        return await self.engine.capture_delete(entity, is_permanent=permanent)
