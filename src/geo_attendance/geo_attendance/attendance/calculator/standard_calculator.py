from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from ...core.exceptions import InvalidTimeOrder
from .base import WorkingHours, WorkingHoursCalculator

_CENTS = Decimal("0.01")
_SECONDS_PER_HOUR = Decimal(3600)


def round_hours(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


class StandardWorkingHoursCalculator(WorkingHoursCalculator):
    """Standard rule: elapsed hours, overtime is whatever exceeds the standard day."""

    def compute(self, clock_in: datetime, clock_out: datetime, standard_hours_per_day: Decimal) -> WorkingHours:
        if clock_out < clock_in:
            raise InvalidTimeOrder(f"Clock-out {clock_out.isoformat()} precedes clock-in {clock_in.isoformat()}")

        seconds = Decimal(str((clock_out - clock_in).total_seconds()))
        working = round_hours(seconds / _SECONDS_PER_HOUR)
        overtime = round_hours(max(Decimal("0"), working - Decimal(str(standard_hours_per_day))))
        return WorkingHours(working_hours=working, overtime_hours=overtime)
