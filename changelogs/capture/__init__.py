"""Change capture — loggable entities, redaction, formatting, engine, observer."""

from changelogs.capture.engine import ChangeCaptureEngine
from changelogs.capture.formatter import format_value, normalize_value
from changelogs.capture.loggable import LoggableMixin
from changelogs.capture.observer import ChangeLogObserver, without_change_logs
from changelogs.capture.redaction import default_excluded_fields, excluded_fields
from changelogs.capture.writer import ChangeLogWriter

__all__ = [
    "ChangeCaptureEngine",
    "ChangeLogObserver",
    "ChangeLogWriter",
    "LoggableMixin",
    "default_excluded_fields",
    "excluded_fields",
    "format_value",
    "normalize_value",
    "without_change_logs",
]
