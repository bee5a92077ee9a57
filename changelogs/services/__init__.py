"""Read-side services — query/statistics and retention."""

from changelogs.services.query import ChangeLogQueryService
from changelogs.services.retention import RetentionService

__all__ = ["ChangeLogQueryService", "RetentionService"]
