"""Redaction policy — which attributes never reach the change log.

The default policy is the union of the configured hidden fields, the
entity type's own declared hidden fields and, when enabled, the timestamp
bookkeeping columns. Entity types that override
`LoggableMixin.change_log_excluded_fields` replace this union entirely.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from changelogs.capture.loggable import LoggableMixin
    from changelogs.config import ChangeLogSettings


def default_excluded_fields(settings: ChangeLogSettings, declared: Iterable[str] = ()) -> set[str]:
    """Config-level hidden fields plus ``declared`` plus timestamps when excluded."""
    excluded = set(settings.hidden_fields)
    excluded.update(declared)
    if settings.exclude_timestamps:
        excluded.update(settings.timestamp_fields)
    return excluded


def excluded_fields(entity: LoggableMixin, settings: ChangeLogSettings) -> set[str]:
    """Fields of ``entity`` that must never be persisted."""
    return set(entity.change_log_excluded_fields(settings))


def strip_excluded(values: Mapping[str, Any], excluded: set[str]) -> dict[str, Any]:
    """Copy of ``values`` without any excluded key."""
    return {key: value for key, value in values.items() if key not in excluded}
