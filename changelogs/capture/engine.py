"""Change capture engine — builds change log entries from lifecycle events.

The engine does not decide *whether* an event is logged: the observer checks
the global switch, the per-action map and the entity veto before calling it.
Here only field-level exclusion applies.

Every built entry goes through the same path: draft → enrich with the
current request context → hand to the writer.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from changelogs.capture.formatter import format_value
from changelogs.capture.loggable import LoggableMixin
from changelogs.capture.redaction import excluded_fields, strip_excluded
from changelogs.capture.writer import ChangeLogWriter
from changelogs.config import ChangeLogSettings
from changelogs.config import settings as default_settings
from changelogs.context import current_context, normalize_method, normalize_path
from changelogs.exceptions import ChangeLogError
from changelogs.models.enums import RecordAction
from changelogs.schemas.change_log import ChangeLogEntry

logger = logging.getLogger(__name__)

FORCE_DELETE_TAG = "force_delete"
PERMANENT_SUFFIX = "(Permanent)"


class ChangeCaptureEngine:
    """Turns create/update/delete/restore events into persisted entries."""

    def __init__(self, writer: ChangeLogWriter, settings: ChangeLogSettings | None = None) -> None:
        self.writer = writer
        self.settings = settings or default_settings

    # ── Public API ───────────────────────────────────────────────────

    async def capture_create(self, entity: LoggableMixin) -> ChangeLogEntry:
        """Record a new entity with all of its loggable attributes."""
        entry = self._draft(
            entity,
            RecordAction.CREATE,
            new_value=self._loggable_attributes(entity),
        )
        return await self._record(entry)

    async def capture_update(
        self,
        entity: LoggableMixin,
        changes: Mapping[str, Any],
    ) -> list[ChangeLogEntry]:
        """Record changed fields, one entry per field or one for all.

        ``changes`` maps field names to their new raw values; old values come
        from the entity's original snapshot, which must not have been
        re-synced yet. Returns an empty list when only excluded fields changed.
        """
        changes = strip_excluded(changes, excluded_fields(entity, self.settings))
        if not changes:
            return []

        original = entity.change_log_original()

        if self.settings.log_per_field:
            entries = [
                self._draft(
                    entity,
                    RecordAction.UPDATE,
                    field_name=field,
                    old_value=format_value(entity, field, original.get(field)),
                    new_value=format_value(entity, field, new_raw),
                )
                for field, new_raw in changes.items()
            ]
        else:
            entries = [
                self._draft(
                    entity,
                    RecordAction.UPDATE,
                    old_value={
                        field: format_value(entity, field, original.get(field)) for field in changes
                    },
                    new_value={
                        field: format_value(entity, field, new_raw) for field, new_raw in changes.items()
                    },
                )
            ]

        return [await self._record(entry) for entry in entries]

    async def capture_delete(self, entity: LoggableMixin, is_permanent: bool = False) -> ChangeLogEntry:
        """Record the last known attributes of a deleted entity."""
        entry = self._draft(
            entity,
            RecordAction.DELETE,
            old_value=self._loggable_attributes(entity),
            permanent=is_permanent,
        )
        return await self._record(entry)

    async def capture_restore(self, entity: LoggableMixin) -> ChangeLogEntry:
        """Record a soft-deleted entity coming back."""
        entry = self._draft(
            entity,
            RecordAction.RESTORE,
            new_value=self._loggable_attributes(entity),
        )
        return await self._record(entry)

    # ── Building ─────────────────────────────────────────────────────

    def _loggable_attributes(self, entity: LoggableMixin) -> dict[str, Any]:
        attributes = strip_excluded(
            entity.change_log_attributes(),
            excluded_fields(entity, self.settings),
        )
        return {field: format_value(entity, field, value) for field, value in attributes.items()}

    def _draft(
        self,
        entity: LoggableMixin,
        action: RecordAction,
        *,
        field_name: str | None = None,
        old_value: Any = None,
        new_value: Any = None,
        permanent: bool = False,
    ) -> ChangeLogEntry:
        subject_id = entity.change_log_key()
        if subject_id is None:
            msg = (
                f"Cannot log {action.value} for {type(entity).__name__} without a primary key; "
                "capture after the entity has been flushed"
            )
            raise ChangeLogError(msg)

        description = entity.change_log_description(action, field_name)
        tags = list(entity.change_log_tags(action))
        if permanent:
            description = f"{description} {PERMANENT_SUFFIX}" if description else PERMANENT_SUFFIX
            if FORCE_DELETE_TAG not in tags:
                tags.append(FORCE_DELETE_TAG)

        return ChangeLogEntry(
            subject_type=entity.change_log_subject_type(),
            subject_id=subject_id,
            action=action,
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
            description=description,
            tags=tags,
        )

    def enrich(self, entry: ChangeLogEntry) -> ChangeLogEntry:
        """Attach actor and (per tracking settings) request details."""
        ctx = current_context()
        track = self.settings.track

        update: dict[str, Any] = {"actor_id": ctx.actor_id}
        if track.ip:
            update["ip_address"] = ctx.ip_address
        if track.user_agent:
            update["user_agent"] = ctx.user_agent
        if track.method:
            update["method"] = normalize_method(ctx.method)
        if track.endpoint:
            update["endpoint"] = normalize_path(ctx.path)
        return entry.model_copy(update=update)

    async def _record(self, entry: ChangeLogEntry) -> ChangeLogEntry:
        enriched = self.enrich(entry)
        await self.writer.persist(enriched)
        logger.debug(
            "Captured %s for %s#%s (field=%s)",
            enriched.action.value,
            enriched.subject_type,
            enriched.subject_id,
            enriched.field_name,
        )
        return enriched
