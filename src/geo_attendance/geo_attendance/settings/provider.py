from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, TypeVar

from ..core.constants import (
    ATTENDANCE_SETTING_CATEGORY,
    DEFAULT_APPROVAL_REQUIRED,
    DEFAULT_LATE_TIME_HOUR,
    DEFAULT_LATE_TIME_MINUTE,
    DEFAULT_WORKING_HOURS_PER_DAY,
    SETTING_APPROVAL_REQUIRED,
    SETTING_LATE_TIME_HOUR,
    SETTING_LATE_TIME_MINUTE,
    SETTING_WORKING_HOURS_PER_DAY,
)
from .model import AttendancePolicy
from .repository import SettingRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}


def _parse_int_in_range(low: int, high: int) -> Callable[[Any], int]:
    def parse(value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("boolean is not a number")
        number = int(str(value).strip())
        if not (low <= number <= high):
            raise ValueError(f"{number} outside {low}..{high}")
        return number

    return parse


def _parse_positive_hours(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    try:
        hours = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"not a number: {value!r}") from None
    if not hours.is_finite() or hours <= 0:
        raise ValueError(f"hours must be positive: {value!r}")
    return hours


def _parse_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {value!r}")


class SettingsProvider:
    """Typed, read-only view over the settings store.

    Every accessor reads the store on call and falls back to the documented
    default when the key is missing or its value cannot be parsed. Callers
    take one ``snapshot()`` per request and pass it along.
    """

    def __init__(self, settings: SettingRepository):
        self._settings = settings

    def _read(self, key: str, default: T, parse: Callable[[Any], T]) -> T:
        setting = self._settings.get(key)
        if setting is None:
            return default
        raw = setting.parsed_value()
        try:
            return parse(raw)
        except (TypeError, ValueError):
            logger.warning("Setting %s has unusable value %r; using default %r", key, raw, default)
            return default

    def late_time_hour(self) -> int:
        return self._read(SETTING_LATE_TIME_HOUR, DEFAULT_LATE_TIME_HOUR, _parse_int_in_range(0, 23))

    def late_time_minute(self) -> int:
        return self._read(SETTING_LATE_TIME_MINUTE, DEFAULT_LATE_TIME_MINUTE, _parse_int_in_range(0, 59))

    def working_hours_per_day(self) -> Decimal:
        return self._read(SETTING_WORKING_HOURS_PER_DAY, Decimal(DEFAULT_WORKING_HOURS_PER_DAY), _parse_positive_hours)

    def approval_required(self) -> bool:
        return self._read(SETTING_APPROVAL_REQUIRED, DEFAULT_APPROVAL_REQUIRED, _parse_flag)

    def snapshot(self) -> AttendancePolicy:
        return AttendancePolicy(
            late_time_hour=self.late_time_hour(),
            late_time_minute=self.late_time_minute(),
            working_hours_per_day=self.working_hours_per_day(),
            approval_required=self.approval_required(),
        )

    def late_time_threshold(self) -> str:
        """Late threshold formatted as HH:MM."""
        return self.snapshot().format_late_threshold()

    def public_settings(self, category: Optional[str] = ATTENDANCE_SETTING_CATEGORY) -> dict[str, Any]:
        return {s.key: s.parsed_value() for s in self._settings.list_public(category=category)}
