"""Exceptions raised by the change log pipeline."""

from __future__ import annotations


class ChangeLogError(Exception):
    """Base class for change log errors."""


class ChangeLogStoreError(ChangeLogError):
    """The record store could not complete a write, read, or delete."""


class DeferredTaskError(ChangeLogError):
    """A deferred task exhausted all of its attempts."""

    def __init__(self, task_name: str, attempts: int, cause: BaseException | None = None) -> None:
        self.task_name = task_name
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Task {task_name} failed after {attempts} attempt(s): {cause!r}")
