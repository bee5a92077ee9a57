"""Pydantic schemas for change log entries, query filters, and statistics.

ChangeLogEntry is the value that flows through the capture pipeline and is
returned by every store. It is immutable once built: the enrichment step
derives a new copy instead of mutating the draft.
"""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from changelogs.models.enums import RecordAction


class ChangeLogEntry(BaseModel):
    """One recorded change of an audited entity."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)

    # Subject (polymorphic reference)
    subject_type: str
    subject_id: str

    action: RecordAction
    field_name: str | None = None
    old_value: Any = None
    new_value: Any = None

    # Context (optional — system-initiated changes carry none)
    actor_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    method: str | None = None
    endpoint: str | None = None

    description: str | None = None
    tags: list[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    occurred_date: date = Field(default_factory=date.today)

    @field_validator("subject_id", "actor_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, v: Any) -> Any:
        """Keys may be ints or UUIDs on the entity side; the log stores text."""
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("occurred_date", mode="before")
    @classmethod
    def _default_occurred_date(cls, v: Any, info: ValidationInfo) -> Any:
        """Rows stored without a date fall back to their creation day.

        The day is taken on the server local clock, the same one ``date.today()``
        uses for the default, the presets and retention cutoffs.
        """
        if v is not None:
            return v
        created_at = info.data.get("created_at")
        return created_at.astimezone().date() if created_at is not None else date.today()

    def payload(self) -> dict[str, Any]:
        """JSON-safe dict of every field, used for deferred tasks and logging."""
        return self.model_dump(mode="json")


class ChangeLogFilters(BaseModel):
    """Conjunctive filters over the change log.

    Every field is optional; an unset field imposes no constraint. The date
    range is inclusive on both ends and applies to ``occurred_date``.
    """

    model_config = ConfigDict(frozen=True)

    subject_type: str | None = None
    subject_id: str | None = None
    # Upper-cased action name; an unknown name is kept and simply matches nothing
    action: str | None = None
    actor_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    tag: str | None = None
    field_name: str | None = None

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, RecordAction):
            return v.value
        return str(v).strip().upper()

    @field_validator("subject_id", "actor_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    def matches(self, entry: ChangeLogEntry) -> bool:
        """Check a single entry against every set filter."""
        if self.subject_type is not None and entry.subject_type != self.subject_type:
            return False
        if self.subject_id is not None and entry.subject_id != self.subject_id:
            return False
        if self.action is not None and entry.action.value != self.action:
            return False
        if self.actor_id is not None and entry.actor_id != self.actor_id:
            return False
        if self.start_date is not None and entry.occurred_date < self.start_date:
            return False
        if self.end_date is not None and entry.occurred_date > self.end_date:
            return False
        if self.tag is not None and self.tag not in entry.tags:
            return False
        if self.field_name is not None and entry.field_name != self.field_name:
            return False
        return True

    def merge(self, **changes: Any) -> ChangeLogFilters:
        """Return a copy with ``changes`` applied (validated)."""
        return ChangeLogFilters(**{**self.model_dump(), **changes})

    # ── Date presets ─────────────────────────────────────────────────

    @classmethod
    def on_date(cls, day: date, **kwargs: Any) -> ChangeLogFilters:
        return cls(start_date=day, end_date=day, **kwargs)

    @classmethod
    def today(cls, **kwargs: Any) -> ChangeLogFilters:
        return cls.on_date(date.today(), **kwargs)

    @classmethod
    def yesterday(cls, **kwargs: Any) -> ChangeLogFilters:
        return cls.on_date(date.today() - timedelta(days=1), **kwargs)

    @classmethod
    def within_days(cls, days: int, **kwargs: Any) -> ChangeLogFilters:
        """Entries that occurred on or after ``today - days``."""
        return cls(start_date=date.today() - timedelta(days=days), **kwargs)

    @classmethod
    def older_than_days(cls, days: int, **kwargs: Any) -> ChangeLogFilters:
        """Entries that occurred strictly before ``today - days``."""
        return cls(end_date=date.today() - timedelta(days=days + 1), **kwargs)

    @classmethod
    def this_week(cls, **kwargs: Any) -> ChangeLogFilters:
        """Monday through Sunday of the current week."""
        today = date.today()
        start = today - timedelta(days=today.weekday())
        return cls(start_date=start, end_date=start + timedelta(days=6), **kwargs)

    @classmethod
    def this_month(cls, **kwargs: Any) -> ChangeLogFilters:
        today = date.today()
        start = today.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return cls(start_date=start, end_date=next_month - timedelta(days=1), **kwargs)


class ChangeLogStatistics(BaseModel):
    """Aggregates computed over one filtered set of entries."""

    total: int = 0
    by_action: dict[str, int] = Field(default_factory=dict)
    by_actor: dict[str, int] = Field(default_factory=dict)
    recent: list[ChangeLogEntry] = Field(default_factory=list)
