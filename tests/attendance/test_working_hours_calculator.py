from datetime import datetime
from decimal import Decimal

import pytest

from geo_attendance.attendance.calculator.standard_calculator import StandardWorkingHoursCalculator
from geo_attendance.core.exceptions import InvalidTimeOrder


def test_half_hour_of_overtime():
    hours = StandardWorkingHoursCalculator().compute(
        datetime(2026, 3, 2, 9, 0), datetime(2026, 3, 2, 17, 30), Decimal("8")
    )
    assert hours.working_hours == Decimal("8.5")
    assert hours.overtime_hours == Decimal("0.5")


def test_hours_are_rounded_to_two_places():
    hours = StandardWorkingHoursCalculator().compute(datetime(2026, 3, 2, 9, 5), datetime(2026, 3, 2, 18, 0), 8)
    assert hours.working_hours == Decimal("8.92")
    assert hours.overtime_hours == Decimal("0.92")


def test_short_day_has_no_overtime():
    hours = StandardWorkingHoursCalculator().compute(
        datetime(2026, 3, 2, 9, 0), datetime(2026, 3, 2, 13, 20), Decimal("8")
    )
    assert hours.working_hours == Decimal("4.33")
    assert hours.overtime_hours == Decimal("0")


def test_zero_length_day():
    moment = datetime(2026, 3, 2, 9, 0)
    hours = StandardWorkingHoursCalculator().compute(moment, moment, Decimal("8"))
    assert hours.working_hours == Decimal("0")


def test_clock_out_before_clock_in_fails_fast():
    with pytest.raises(InvalidTimeOrder):
        StandardWorkingHoursCalculator().compute(
            datetime(2026, 3, 2, 17, 0), datetime(2026, 3, 2, 9, 0), Decimal("8")
        )
