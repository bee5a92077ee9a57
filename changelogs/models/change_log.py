"""ChangeLog model — one recorded change of an audited entity.

Rows are written once by the capture pipeline and never updated. They are
removed only by the retention sweep or explicit date-range deletes.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import Date, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, validates

from changelogs.models.base import Base, TimestampMixin


class ChangeLog(TimestampMixin, Base):
    """Immutable change log entry."""

    __tablename__ = "change_logs"
    __table_args__ = (
        Index("ix_change_logs_subject", "subject_type", "subject_id"),
        Index("ix_change_logs_subject_type_action", "subject_type", "action"),
        Index("ix_change_logs_actor_created", "actor_id", "created_at"),
        Index("ix_change_logs_occurred_action", "occurred_date", "action"),
    )

    # Polymorphic subject reference (type tag + id, no foreign key)
    subject_type: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    subject_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    field_name: Mapped[str | None] = mapped_column(String(255), comment="Set only for per-field entries")

    old_value: Mapped[Any | None] = mapped_column(JSONB(none_as_null=True))
    new_value: Mapped[Any | None] = mapped_column(JSONB(none_as_null=True))

    # Request context (all nullable — system-initiated changes have none)
    actor_id: Mapped[str | None] = mapped_column(String(100), index=True, comment="Acting user ID")
    ip_address: Mapped[str | None] = mapped_column(String(45))
    user_agent: Mapped[str | None] = mapped_column(Text)
    method: Mapped[str | None] = mapped_column(String(10))
    endpoint: Mapped[str | None] = mapped_column(String(2048))

    description: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(JSONB(none_as_null=True))

    occurred_date: Mapped[date | None] = mapped_column(Date, index=True, default=date.today)

    @validates("occurred_date")
    def _validate_occurred_date(self, key: str, value: date | None) -> date | None:
        current = self.__dict__.get(key)
        if current is not None and value != current:
            msg = "occurred_date cannot be changed once set"
            raise ValueError(msg)
        return value

    def __repr__(self) -> str:
        return f"<ChangeLog {self.action} {self.subject_type}#{self.subject_id}>"
