"""Value formatter — turns raw attribute values into loggable values.

Resolution order (first match wins):
1. the entity type's `format_change_log_value` override;
2. dates and datetimes → "YYYY-MM-DD HH:MM:SS";
3. values with a canonical structured form (pydantic models, dataclass
   instances) → that form;
4. booleans → "true" / "false";
5. anything else unchanged.

Booleans are stored as strings because old/new values share one JSON column
with arbitrary payloads, and consumers compare them as text.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from changelogs.capture.loggable import LoggableMixin

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def normalize_value(value: Any) -> Any:
    """Structural normalization (steps 2–5)."""
    if isinstance(value, (datetime, date)):
        return value.strftime(DATETIME_FORMAT)

    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)

    if isinstance(value, bool):
        return "true" if value else "false"

    return value


def format_value(entity: LoggableMixin, field: str, value: Any) -> Any:
    """Format ``value`` of ``field`` for storage, honouring the entity hook."""
    return entity.format_change_log_value(value, field)
