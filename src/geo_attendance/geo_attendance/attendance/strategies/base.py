from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_clock_in(self, *, local_time: datetime) -> StatusDecision:
        raise NotImplementedError

    def decide_clock_out(self, *, current: AttendanceStatus) -> StatusDecision:
        # Clock-out never changes the status decided at clock-in.
        return StatusDecision(status=current)
