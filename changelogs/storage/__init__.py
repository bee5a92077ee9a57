"""Change log stores."""

from changelogs.storage.base import ChangeLogStore
from changelogs.storage.inmemory import InMemoryChangeLogStore

__all__ = [
    "ChangeLogStore",
    "InMemoryChangeLogStore",
]
