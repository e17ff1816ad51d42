"""Setting keys, policy defaults and field limits."""

EARTH_RADIUS_METERS = 6_371_000

# Setting keys stored in the settings table.
SETTING_LATE_TIME_HOUR = "late_time_hour"
SETTING_LATE_TIME_MINUTE = "late_time_minute"
SETTING_WORKING_HOURS_PER_DAY = "working_hours_per_day"
SETTING_APPROVAL_REQUIRED = "attendance_approval_required"

DEFAULT_LATE_TIME_HOUR = 9
DEFAULT_LATE_TIME_MINUTE = 0
DEFAULT_WORKING_HOURS_PER_DAY = 8
DEFAULT_APPROVAL_REQUIRED = True

DEFAULT_SETTING_CATEGORY = "general"
ATTENDANCE_SETTING_CATEGORY = "attendance"

MAX_NOTES_LENGTH = 500
DEFAULT_GEOFENCE_COLOR = "#007BFF"
DEFAULT_PAGE_SIZE = 20
DEFAULT_HISTORY_LIMIT = 30
