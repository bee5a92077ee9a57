"""Tests for changelogs/config.py — defaults, env loading and lenient fallback."""

from __future__ import annotations

import logging

from changelogs.config import (
    DEFAULT_HIDDEN_FIELDS,
    ActionSettings,
    ChangeLogSettings,
    CleanupSettings,
    DatabaseSettings,
    QueueSettings,
)
from changelogs.models.enums import RecordAction


class TestDefaults:
    """Documented defaults when nothing is configured."""

    def test_root_defaults(self, settings):
        assert settings.enabled is True
        assert settings.log_per_field is False
        assert settings.exclude_timestamps is True
        assert settings.limit == 20
        assert settings.hidden_fields == DEFAULT_HIDDEN_FIELDS
        assert settings.timestamp_fields == ["created_at", "updated_at", "deleted_at"]

    def test_every_action_enabled(self, settings):
        for action in RecordAction:
            assert settings.actions.is_enabled(action)

    def test_tracking_all_on(self, settings):
        assert settings.track.ip
        assert settings.track.user_agent
        assert settings.track.method
        assert settings.track.endpoint

    def test_queue_and_cleanup_off(self, settings):
        assert settings.queue.enabled is False
        assert settings.queue.name == "default"
        assert settings.queue.max_attempts == 3
        assert settings.queue.timeout == 30.0
        assert settings.cleanup.enabled is False
        assert settings.cleanup.days == 365

    def test_hidden_fields_not_shared_between_instances(self, make_settings):
        first = make_settings()
        first.hidden_fields.append("pin")
        assert "pin" not in make_settings().hidden_fields


class TestEnvironment:
    """Values read from CHANGE_LOGS_* variables."""

    def test_root_env(self, monkeypatch):
        monkeypatch.setenv("CHANGE_LOGS_LOG_PER_FIELD", "true")
        monkeypatch.setenv("CHANGE_LOGS_LIMIT", "50")
        monkeypatch.setenv("CHANGE_LOGS_HIDDEN_FIELDS", '["ssn"]')

        s = ChangeLogSettings(_env_file=None)
        assert s.log_per_field is True
        assert s.limit == 50
        assert s.hidden_fields == ["ssn"]

    def test_action_map_env(self, monkeypatch):
        monkeypatch.setenv("CHANGE_LOGS_TRACK_ACTION_DELETE", "false")

        actions = ActionSettings(_env_file=None)
        assert actions.is_enabled(RecordAction.DELETE) is False
        assert actions.is_enabled(RecordAction.UPDATE) is True

    def test_queue_env(self, monkeypatch):
        monkeypatch.setenv("CHANGE_LOGS_QUEUE_ENABLED", "1")
        monkeypatch.setenv("CHANGE_LOGS_QUEUE_NAME", "audit")

        queue = QueueSettings(_env_file=None)
        assert queue.enabled is True
        assert queue.name == "audit"

    def test_sync_database_url(self):
        db = DatabaseSettings(
            _env_file=None,
            database_url="postgresql+asyncpg://u:p@db:5432/app",
        )
        assert db.database_url_sync == "postgresql://u:p@db:5432/app"


class TestLenientFallback:
    """Invalid values are logged and replaced by the default."""

    def test_invalid_int_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("CHANGE_LOGS_LIMIT", "abc")

        with caplog.at_level(logging.WARNING, logger="changelogs.config"):
            s = ChangeLogSettings(_env_file=None)

        assert s.limit == 20
        assert "limit" in caplog.text

    def test_comma_separated_hidden_fields(self, monkeypatch):
        monkeypatch.setenv("CHANGE_LOGS_HIDDEN_FIELDS", "password, api_token")
        monkeypatch.setenv("CHANGE_LOGS_TIMESTAMP_FIELDS", "created_at")

        s = ChangeLogSettings(_env_file=None)

        assert s.hidden_fields == ["password", "api_token"]
        assert s.timestamp_fields == ["created_at"]

    def test_malformed_json_list_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("CHANGE_LOGS_HIDDEN_FIELDS", '["password",')

        with caplog.at_level(logging.WARNING, logger="changelogs.config"):
            s = ChangeLogSettings(_env_file=None)

        assert s.hidden_fields == DEFAULT_HIDDEN_FIELDS
        assert "hidden_fields" in caplog.text

    def test_out_of_range_falls_back(self, monkeypatch):
        monkeypatch.setenv("CHANGE_LOGS_CLEANUP_DAYS", "-5")
        assert CleanupSettings(_env_file=None).days == 365

    def test_invalid_bool_falls_back(self, monkeypatch):
        monkeypatch.setenv("CHANGE_LOGS_ENABLED", "maybe")
        assert ChangeLogSettings(_env_file=None).enabled is True

    def test_invalid_queue_attempts_falls_back(self):
        assert QueueSettings(_env_file=None, max_attempts=0).max_attempts == 3

    def test_unknown_log_level(self, make_settings):
        assert make_settings(log_level="chatty").log_level == "INFO"

    def test_log_level_normalized(self, make_settings):
        assert make_settings(log_level="debug").log_level == "DEBUG"

    def test_is_production(self, make_settings):
        assert make_settings(environment="production").is_production
        assert not make_settings().is_production
