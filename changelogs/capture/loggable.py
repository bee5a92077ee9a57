"""LoggableMixin — the capability interface of an audited entity.

Add the mixin to any SQLAlchemy model (or plain class) whose lifecycle should
be recorded, then override only the hooks the entity type needs:

    class User(LoggableMixin, Base):
        __tablename__ = "users"
        change_log_hidden = ("two_factor_secret",)

        def change_log_tags(self, action: RecordAction) -> list[str]:
            return ["accounts"]

Every hook has a documented default, so entities that override nothing are
logged with config-level behaviour.

The mixin also keeps the entity's *original* snapshot: the attribute values as
they were last synced (on ORM load/refresh, or by the observer after each
captured event). Update entries read old values from this snapshot, so an
update must be captured before the snapshot is re-synced.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import event
from sqlalchemy import inspect as sa_inspect

from changelogs.capture.formatter import normalize_value
from changelogs.capture.redaction import default_excluded_fields

if TYPE_CHECKING:
    from changelogs.config import ChangeLogSettings
    from changelogs.models.enums import RecordAction

_ORIGINAL_KEY = "_change_log_original"


class LoggableMixin:
    """Entity whose create/update/delete/restore events are recorded."""

    # Subject type tag stored on every entry; defaults to the class name.
    change_log_type: ClassVar[str | None] = None

    # Entity-specific fields added to the configured hidden fields.
    change_log_hidden: ClassVar[tuple[str, ...]] = ()

    # ── Subject identity ─────────────────────────────────────────────

    @classmethod
    def change_log_subject_type(cls) -> str:
        return cls.change_log_type or cls.__name__

    def change_log_key(self) -> str | None:
        """Primary key as text (composite keys joined with a comma)."""
        state = sa_inspect(self, raiseerr=False)
        if state is not None and state.identity is not None:
            values = list(state.identity)
        elif state is not None:
            mapper = state.mapper
            values = [state.dict.get(mapper.get_property_by_column(col).key) for col in mapper.primary_key]
        else:
            values = [getattr(self, "id", None)]
        if any(value is None for value in values):
            return None
        return ",".join(str(value) for value in values)

    # ── Attribute state ──────────────────────────────────────────────

    def change_log_attributes(self) -> dict[str, Any]:
        """Current attribute values.

        For mapped instances only loaded column attributes are returned, so
        reading never triggers a lazy load.
        """
        state = sa_inspect(self, raiseerr=False)
        if state is not None:
            loaded = state.dict
            return {
                attr.key: loaded[attr.key]
                for attr in state.mapper.column_attrs
                if attr.key in loaded
            }
        return {key: value for key, value in vars(self).items() if not key.startswith("_")}

    def change_log_original(self) -> dict[str, Any]:
        """Attribute values as of the last snapshot sync (empty if never synced)."""
        return dict(self.__dict__.get(_ORIGINAL_KEY) or {})

    def sync_change_log_original(self) -> None:
        """Take a new snapshot of the current attribute values."""
        self.__dict__[_ORIGINAL_KEY] = copy.deepcopy(self.change_log_attributes())

    def change_log_dirty(self) -> dict[str, Any]:
        """Attributes whose current value differs from the snapshot."""
        original = self.change_log_original()
        return {
            key: value
            for key, value in self.change_log_attributes().items()
            if key not in original or original[key] != value
        }

    # ── Hooks ────────────────────────────────────────────────────────

    def change_log_excluded_fields(self, settings: ChangeLogSettings) -> set[str]:
        """Fields never written to the log.

        Override to replace the default union (config hidden fields, the
        class's ``change_log_hidden`` and timestamp fields) entirely.
        """
        return default_excluded_fields(settings, type(self).change_log_hidden)

    def format_change_log_value(self, value: Any, field: str) -> Any:
        """Loggable representation of ``value`` for ``field``."""
        return normalize_value(value)

    def change_log_description(self, action: RecordAction, field: str | None = None) -> str | None:
        """Human-readable description for an entry (None by default)."""
        return None

    def change_log_tags(self, action: RecordAction) -> list[str]:
        """Category tags attached to every entry for ``action``."""
        return []

    def should_log_changes(self, action: RecordAction) -> bool:
        """Per-action veto; return False to skip logging ``action``."""
        return True


# ── ORM integration ──────────────────────────────────────────────────


@event.listens_for(LoggableMixin, "load", propagate=True)
def _snapshot_on_load(target: LoggableMixin, context: Any) -> None:
    target.sync_change_log_original()


@event.listens_for(LoggableMixin, "refresh", propagate=True)
def _snapshot_on_refresh(target: LoggableMixin, context: Any, attrs: Any) -> None:
    target.sync_change_log_original()
