"""SQLAlchemy ORM models for the change log store.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from changelogs.models.base import Base, TimestampMixin
from changelogs.models.change_log import ChangeLog
from changelogs.models.enums import RecordAction

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Models
    "ChangeLog",
    # Enums
    "RecordAction",
]
