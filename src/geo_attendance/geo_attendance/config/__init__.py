import os


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "geo_attendance.config.production"

    if env in {"test", "testing"}:
        return "geo_attendance.config.testing"

    return "geo_attendance.config.development"
