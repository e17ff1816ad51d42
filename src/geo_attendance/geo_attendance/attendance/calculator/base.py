from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class WorkingHours:
    working_hours: Decimal
    overtime_hours: Decimal


class WorkingHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for working hours)."""

    @abstractmethod
    def compute(self, clock_in: datetime, clock_out: datetime, standard_hours_per_day: Decimal) -> WorkingHours:
        raise NotImplementedError
