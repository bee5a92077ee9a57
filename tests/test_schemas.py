"""Tests for ChangeLogEntry and ChangeLogFilters."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta

import pytest
from pydantic import ValidationError

from changelogs.models.enums import RecordAction
from changelogs.schemas.change_log import ChangeLogEntry, ChangeLogFilters


class TestChangeLogEntry:
    def test_defaults(self):
        entry = ChangeLogEntry(subject_type="User", subject_id="1", action="CREATE")

        assert isinstance(entry.id, uuid.UUID)
        assert entry.action == RecordAction.CREATE
        assert entry.tags == []
        assert entry.occurred_date == date.today()
        assert entry.created_at.tzinfo is not None

    def test_identifiers_coerced_to_text(self):
        key = uuid.uuid4()
        entry = ChangeLogEntry(subject_type="User", subject_id=key, action="CREATE", actor_id=5)

        assert entry.subject_id == str(key)
        assert entry.actor_id == "5"

    def test_unknown_action_rejected(self):
        with pytest.raises(ValidationError):
            ChangeLogEntry(subject_type="User", subject_id="1", action="ARCHIVE")

    def test_frozen(self):
        entry = ChangeLogEntry(subject_type="User", subject_id="1", action="CREATE")
        with pytest.raises(ValidationError):
            entry.description = "changed"

    def test_missing_date_derived_from_created_at(self):
        entry = ChangeLogEntry(
            subject_type="User",
            subject_id="1",
            action="UPDATE",
            created_at=datetime(2024, 12, 31, 23, 0, tzinfo=UTC),
            occurred_date=None,
        )
        assert entry.occurred_date == entry.created_at.astimezone().date()

    def test_default_and_fallback_use_same_clock(self):
        fallback = ChangeLogEntry(
            subject_type="User", subject_id="1", action="UPDATE", created_at=datetime.now(UTC), occurred_date=None
        )
        default = ChangeLogEntry(subject_type="User", subject_id="1", action="UPDATE")
        assert fallback.occurred_date == default.occurred_date == date.today()

    def test_payload_is_json_safe(self):
        entry = ChangeLogEntry(
            subject_type="User",
            subject_id="1",
            action="DELETE",
            old_value={"name": "John"},
        )
        payload = entry.payload()

        assert payload["id"] == str(entry.id)
        assert payload["action"] == "DELETE"
        assert payload["old_value"] == {"name": "John"}
        assert isinstance(payload["occurred_date"], str)


class TestChangeLogFilters:
    def test_action_case_insensitive(self):
        assert ChangeLogFilters(action=" update ").action == RecordAction.UPDATE

    def test_unknown_action_kept_and_matches_nothing(self):
        filters = ChangeLogFilters(action="publish")
        entry = ChangeLogEntry(subject_type="User", subject_id="1", action="UPDATE")

        assert filters.action == "PUBLISH"
        assert not filters.matches(entry)

    def test_merge_returns_new_instance(self):
        base = ChangeLogFilters(subject_type="User")
        merged = base.merge(action="delete", actor_id=9)

        assert base.action is None
        assert merged.subject_type == "User"
        assert merged.action == RecordAction.DELETE
        assert merged.actor_id == "9"

    def test_on_date(self):
        day = date(2025, 5, 5)
        filters = ChangeLogFilters.on_date(day, subject_type="Post")
        assert (filters.start_date, filters.end_date, filters.subject_type) == (day, day, "Post")

    def test_this_week_spans_monday_to_sunday(self):
        filters = ChangeLogFilters.this_week()
        assert filters.start_date.weekday() == 0
        assert filters.end_date - filters.start_date == timedelta(days=6)
        assert filters.start_date <= date.today() <= filters.end_date

    def test_this_month(self):
        filters = ChangeLogFilters.this_month()
        assert filters.start_date.day == 1
        assert (filters.end_date + timedelta(days=1)).day == 1
        assert filters.start_date.month == filters.end_date.month

    def test_matches_requires_every_filter(self):
        entry = ChangeLogEntry(
            subject_type="User",
            subject_id="1",
            action="UPDATE",
            actor_id="alice",
            tags=["accounts"],
        )

        assert ChangeLogFilters().matches(entry)
        assert ChangeLogFilters(subject_type="User", tag="accounts").matches(entry)
        assert not ChangeLogFilters(subject_type="User", tag="billing").matches(entry)
        assert not ChangeLogFilters(subject_type="User", actor_id="bob").matches(entry)
        assert not ChangeLogFilters(end_date=date.today() - timedelta(days=1)).matches(entry)
