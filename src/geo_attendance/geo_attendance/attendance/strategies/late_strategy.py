from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Clock-in after the late threshold."""

    def decide_clock_in(self, *, local_time: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE)
