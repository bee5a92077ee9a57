"""Wires store, writer, capture engine, observer and services together."""

from __future__ import annotations

from dataclasses import dataclass

from changelogs.capture.engine import ChangeCaptureEngine
from changelogs.capture.observer import ChangeLogObserver
from changelogs.capture.writer import ChangeLogWriter
from changelogs.config import ChangeLogSettings
from changelogs.config import settings as default_settings
from changelogs.jobs.queue import TaskQueue
from changelogs.services.query import ChangeLogQueryService
from changelogs.services.retention import RetentionService
from changelogs.storage.base import ChangeLogStore


@dataclass
class ChangeLogs:
    settings: ChangeLogSettings
    store: ChangeLogStore
    writer: ChangeLogWriter
    engine: ChangeCaptureEngine
    observer: ChangeLogObserver
    query: ChangeLogQueryService
    retention: RetentionService


def create_change_logs(
    settings: ChangeLogSettings | None = None,
    store: ChangeLogStore | None = None,
    queue: TaskQueue | None = None,
) -> ChangeLogs:
    """Build the full component set.

    Without an explicit ``store`` the PostgreSQL store is used, which creates
    the database engine on first import.
    """
    settings = settings or default_settings
    if store is None:
        from changelogs.storage.postgres import PostgresChangeLogStore

        store = PostgresChangeLogStore()

    writer = ChangeLogWriter(store, settings, queue)
    engine = ChangeCaptureEngine(writer, settings)
    return ChangeLogs(
        settings=settings,
        store=store,
        writer=writer,
        engine=engine,
        observer=ChangeLogObserver(engine, settings),
        query=ChangeLogQueryService(store, settings),
        retention=RetentionService(store, settings),
    )
