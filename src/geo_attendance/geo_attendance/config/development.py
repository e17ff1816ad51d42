import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# IANA zone used for work dates and lateness when a geofence has none.
# Empty means timestamps are taken as local wall-clock time.
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "")

# If enabled, schema.sql is applied and missing default settings are seeded on startup
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
