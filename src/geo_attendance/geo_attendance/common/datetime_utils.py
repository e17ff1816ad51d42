from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


def _zone(timezone_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {timezone_name}") from None


def now_utc() -> datetime:
    """Current time as an aware UTC datetime; services take it as an injectable clock."""
    return datetime.now(timezone.utc)


def to_wall_clock(moment: datetime, timezone_name: Optional[str] = None) -> datetime:
    """Naive wall-clock time of ``moment`` in ``timezone_name``.

    This is the form attendance timestamps are compared and stored in
    (MySQL DATETIME keeps no zone). Aware values are converted, to the
    server's local zone when no name is given; naive values are already
    wall-clock time and are returned as is.
    """
    if moment.tzinfo is None:
        return moment
    target = _zone(timezone_name) if timezone_name else None
    return moment.astimezone(target).replace(tzinfo=None)


def to_local(moment: datetime, timezone_name: Optional[str] = None, from_timezone: Optional[str] = None) -> datetime:
    """Express ``moment`` in ``timezone_name``.

    A naive ``moment`` is wall-clock time in ``from_timezone``; without one
    it cannot be placed and is returned as is.
    """
    if not timezone_name:
        return moment
    if moment.tzinfo is None:
        if not from_timezone:
            return moment
        moment = moment.replace(tzinfo=_zone(from_timezone))
    return moment.astimezone(_zone(timezone_name))
