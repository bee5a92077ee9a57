"""changelogs - field-level change logging for SQLAlchemy entities."""

__version__ = "0.1.0"

from changelogs.bootstrap import ChangeLogs, create_change_logs  # noqa: E402
from changelogs.capture import LoggableMixin, without_change_logs  # noqa: E402
from changelogs.context import request_context, set_actor  # noqa: E402
from changelogs.models.enums import RecordAction  # noqa: E402
from changelogs.schemas.change_log import ChangeLogEntry, ChangeLogFilters  # noqa: E402

__all__ = [
    "ChangeLogEntry",
    "ChangeLogFilters",
    "ChangeLogs",
    "LoggableMixin",
    "RecordAction",
    "__version__",
    "create_change_logs",
    "request_context",
    "set_actor",
    "without_change_logs",
]
