"""Deferred execution — task queue and change log tasks."""

from changelogs.jobs.create_change_log import CreateChangeLogTask
from changelogs.jobs.queue import Task, TaskHandle, TaskQueue, TaskStatus, task_queue

__all__ = [
    "CreateChangeLogTask",
    "Task",
    "TaskHandle",
    "TaskQueue",
    "TaskStatus",
    "task_queue",
]
