from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from typing import Any, Optional

from ..core.constants import (
    DEFAULT_APPROVAL_REQUIRED,
    DEFAULT_LATE_TIME_HOUR,
    DEFAULT_LATE_TIME_MINUTE,
    DEFAULT_SETTING_CATEGORY,
    DEFAULT_WORKING_HOURS_PER_DAY,
)


@dataclass(frozen=True)
class Setting:
    """Key/value policy entry; ``value`` holds JSON text."""

    key: str
    value: str
    description: Optional[str] = None
    category: str = DEFAULT_SETTING_CATEGORY
    is_public: bool = False

    def parsed_value(self) -> Any:
        try:
            return json.loads(self.value)
        except (TypeError, ValueError):
            return self.value

    @staticmethod
    def serialize(value: Any) -> str:
        return value if isinstance(value, str) else json.dumps(value)


@dataclass(frozen=True)
class AttendancePolicy:
    """Resolved policy snapshot passed into each attendance transition."""

    late_time_hour: int = DEFAULT_LATE_TIME_HOUR
    late_time_minute: int = DEFAULT_LATE_TIME_MINUTE
    working_hours_per_day: Decimal = Decimal(DEFAULT_WORKING_HOURS_PER_DAY)
    approval_required: bool = DEFAULT_APPROVAL_REQUIRED

    @property
    def late_threshold(self) -> time:
        return time(self.late_time_hour, self.late_time_minute)

    def format_late_threshold(self) -> str:
        return f"{self.late_time_hour:02d}:{self.late_time_minute:02d}"
