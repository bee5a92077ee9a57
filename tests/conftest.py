"""Shared fixtures: loggable test models and an in-memory capture pipeline."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest
from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from changelogs.capture.engine import ChangeCaptureEngine
from changelogs.capture.loggable import LoggableMixin
from changelogs.capture.observer import ChangeLogObserver
from changelogs.capture.writer import ChangeLogWriter
from changelogs.config import ChangeLogSettings
from changelogs.jobs.queue import TaskQueue
from changelogs.models.enums import RecordAction
from changelogs.storage.inmemory import InMemoryChangeLogStore


class ModelBase(DeclarativeBase):
    pass


class User(LoggableMixin, ModelBase):
    __tablename__ = "users"

    change_log_hidden = ("two_factor_secret",)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255))
    password: Mapped[str | None] = mapped_column(String(255))
    remember_token: Mapped[str | None] = mapped_column(String(100))
    two_factor_secret: Mapped[str | None] = mapped_column(String(100))
    is_admin: Mapped[bool | None] = mapped_column(Boolean)
    created_at: Mapped[datetime | None] = mapped_column(DateTime)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime)


class Post(LoggableMixin, ModelBase):
    __tablename__ = "posts"

    change_log_type = "post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str | None] = mapped_column(String(20))
    published_at: Mapped[datetime | None] = mapped_column(DateTime)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime)

    def change_log_description(self, action: RecordAction, field: str | None = None) -> str | None:
        if field:
            return f"Post {self.title!r} {field} changed"
        return f"Post {self.title!r} {action.value.lower()}d"

    def change_log_tags(self, action: RecordAction) -> list[str]:
        return ["content"]

    def should_log_changes(self, action: RecordAction) -> bool:
        # Drafts are not audited until they are published
        return self.status != "draft"


@pytest.fixture
def make_settings():
    """Build isolated settings (no .env file) with field overrides."""

    def _make(**overrides: Any) -> ChangeLogSettings:
        return ChangeLogSettings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def store():
    return InMemoryChangeLogStore()


@pytest.fixture
def task_queue():
    return TaskQueue()


@pytest.fixture
def writer(store, settings, task_queue):
    return ChangeLogWriter(store, settings, task_queue)


@pytest.fixture
def engine(writer, settings):
    return ChangeCaptureEngine(writer, settings)


@pytest.fixture
def observer(engine, settings):
    return ChangeLogObserver(engine, settings)


@pytest.fixture
def user():
    return User(id=1, name="John", email="john@x.com", password="secret")
