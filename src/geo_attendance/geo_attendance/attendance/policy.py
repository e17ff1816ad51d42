from __future__ import annotations

from dataclasses import replace
from datetime import datetime, time
from typing import Optional

from ..common.datetime_utils import to_local
from ..geofences.model import Geofence
from ..settings.model import AttendancePolicy


def is_late(moment: datetime, threshold: time) -> bool:
    """True when the wall-clock time of ``moment`` is strictly after ``threshold``."""
    return moment.time() > threshold


def effective_policy(policy: AttendancePolicy, geofence: Optional[Geofence]) -> AttendancePolicy:
    """Apply a geofence's working-hours override on top of the global policy."""
    override = geofence.working_hours if geofence else None
    if override is None:
        return policy

    if override.late_time is not None:
        policy = replace(policy, late_time_hour=override.late_time.hour, late_time_minute=override.late_time.minute)
    if override.hours_per_day is not None:
        policy = replace(policy, working_hours_per_day=override.hours_per_day)
    return policy


def local_time_for(moment: datetime, geofence: Optional[Geofence], default_timezone: Optional[str] = None) -> datetime:
    """Wall-clock time of ``moment`` at the geofence, else in the default zone.

    Naive moments are read as wall-clock time in ``default_timezone``.
    """
    timezone_name = geofence.timezone if geofence and geofence.timezone else default_timezone
    return to_local(moment, timezone_name, default_timezone)
