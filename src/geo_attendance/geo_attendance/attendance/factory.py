from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..settings.model import AttendancePolicy
from .policy import is_late
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_clock_in(self, *, local_time: datetime, policy: AttendancePolicy) -> AttendanceStrategy:
        if is_late(local_time, policy.late_threshold):
            return LateStrategy()
        return PresentStrategy()

    def for_clock_out(self) -> AttendanceStrategy:
        return PresentStrategy()
