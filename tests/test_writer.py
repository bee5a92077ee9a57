"""Tests for ChangeLogWriter — synchronous and deferred persistence."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from changelogs.capture.writer import ChangeLogWriter
from changelogs.exceptions import ChangeLogStoreError
from changelogs.jobs.create_change_log import CreateChangeLogTask
from changelogs.jobs.queue import TaskStatus
from changelogs.models.enums import RecordAction
from changelogs.schemas.change_log import ChangeLogEntry


def _entry(**kwargs) -> ChangeLogEntry:
    data = {"subject_type": "User", "subject_id": "1", "action": RecordAction.CREATE}
    data.update(kwargs)
    return ChangeLogEntry(**data)


@pytest.fixture
def deferred_settings(make_settings):
    return make_settings(queue={"enabled": True, "name": "audit", "max_attempts": 2, "backoff": 0})


class TestSynchronous:
    @pytest.mark.asyncio
    async def test_writes_immediately(self, writer, store):
        entry = _entry()

        assert await writer.persist(entry) is None
        assert store.entries == [entry]

    @pytest.mark.asyncio
    async def test_store_errors_propagate(self, settings, task_queue):
        failing = AsyncMock()
        failing.create.side_effect = ChangeLogStoreError("db down")
        writer = ChangeLogWriter(failing, settings, task_queue)

        with pytest.raises(ChangeLogStoreError, match="db down"):
            await writer.persist(_entry())


class TestDeferred:
    @pytest.mark.asyncio
    async def test_submits_task_on_configured_channel(self, store, deferred_settings, task_queue):
        writer = ChangeLogWriter(store, deferred_settings, task_queue)
        assert writer.deferred

        handle = await writer.persist(_entry())

        assert handle.channel == "audit"
        assert isinstance(handle.task, CreateChangeLogTask)
        assert handle.task.max_attempts == 2
        assert await handle.wait(timeout=1) == TaskStatus.SUCCEEDED
        assert len(store.entries) == 1
        await task_queue.stop()

    @pytest.mark.asyncio
    async def test_created_at_stamped_when_written(self, store, deferred_settings, task_queue):
        writer = ChangeLogWriter(store, deferred_settings, task_queue)
        drafted = _entry(created_at=datetime(2020, 1, 1, tzinfo=UTC), occurred_date=date(2020, 1, 1))

        handle = await writer.persist(drafted)
        assert await handle.wait(timeout=1) == TaskStatus.SUCCEEDED

        (stored,) = store.entries
        assert stored.id == drafted.id
        assert stored.created_at > drafted.created_at
        assert stored.occurred_date == date(2020, 1, 1)
        await task_queue.stop()

    @pytest.mark.asyncio
    async def test_terminal_failure_is_logged_not_raised(self, deferred_settings, task_queue, caplog):
        failing = AsyncMock()
        failing.create.side_effect = ChangeLogStoreError("db down")
        writer = ChangeLogWriter(failing, deferred_settings, task_queue)
        entry = _entry(actor_id="7")

        with caplog.at_level(logging.ERROR, logger="changelogs.jobs.create_change_log"):
            handle = await writer.persist(entry)
            status = await handle.wait(timeout=1)

        assert status == TaskStatus.FAILED
        assert failing.create.await_count == 2
        assert handle.error.attempts == 2
        assert "Failed to create change log after 2 attempt(s)" in caplog.text
        assert str(entry.id) in caplog.text
        await task_queue.stop()
