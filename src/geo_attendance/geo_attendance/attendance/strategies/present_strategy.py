from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Clock-in at or before the late threshold."""

    def decide_clock_in(self, *, local_time: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
