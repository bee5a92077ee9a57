"""Domain enums used across SQLAlchemy models and Pydantic schemas.

All enums use str mixin for JSON serialization and PostgreSQL string columns.
"""

from __future__ import annotations

from enum import Enum


class RecordAction(str, Enum):
    """Lifecycle action recorded by a change log entry."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    RESTORE = "RESTORE"

    @classmethod
    def parse(cls, value: str | RecordAction) -> RecordAction:
        """Coerce a case-insensitive action name (``"update"``) into a member."""
        if isinstance(value, RecordAction):
            return value
        return cls(value.strip().upper())
