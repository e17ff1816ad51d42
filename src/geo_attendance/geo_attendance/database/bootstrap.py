from __future__ import annotations

import logging
import re
from pathlib import Path

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
from ..settings.repository import SettingRepository
from ..settings.service import SettingService
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

# key, value, description, is_public
DEFAULT_SETTINGS = (
    (SETTING_LATE_TIME_HOUR, DEFAULT_LATE_TIME_HOUR, "Hour after which attendance is considered late (24-hour format)", True),
    (SETTING_LATE_TIME_MINUTE, DEFAULT_LATE_TIME_MINUTE, "Minute after which attendance is considered late", True),
    (SETTING_WORKING_HOURS_PER_DAY, DEFAULT_WORKING_HOURS_PER_DAY, "Standard working hours per day for overtime calculation", True),
    (SETTING_APPROVAL_REQUIRED, DEFAULT_APPROVAL_REQUIRED, "Whether attendance submissions require admin approval", False),
)

_DATABASE_LINES = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;")
_COMMENT_LINES = re.compile(r"(?m)^\s*--.*$")
_TOKENS = re.compile(r"""'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|;|[^'";]+|['"]""", re.S)


def split_schema(sql: str) -> list[str]:
    """Split a DDL script into statements.

    Database selection is left to the connection, so ``CREATE DATABASE`` and
    ``USE`` lines are dropped. Semicolons inside quoted literals do not end
    a statement.
    """
    sql = _COMMENT_LINES.sub("", _DATABASE_LINES.sub("", sql))

    statements: list[str] = []
    current: list[str] = []
    for token in _TOKENS.findall(sql):
        if token != ";":
            current.append(token)
            continue
        stmt = "".join(current).strip()
        if stmt:
            statements.append(stmt)
        current = []

    tail = "".join(current).strip()
    if tail:
        statements.append(tail)
    return statements


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(conn_factory)
    statements = split_schema(Path(schema_path).read_text(encoding="utf-8"))

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %d schema statements to %s", len(statements), conn_factory.database)


def seed_default_settings(settings: SettingRepository) -> list[str]:
    """Insert the attendance policy defaults that are not stored yet.

    Existing values are never overwritten. Returns the keys that were added.
    """
    service = SettingService(settings)
    added = []
    for key, value, description, is_public in DEFAULT_SETTINGS:
        if settings.get(key) is not None:
            continue
        service.set_setting(
            key=key,
            value=value,
            description=description,
            category=ATTENDANCE_SETTING_CATEGORY,
            is_public=is_public,
        )
        added.append(key)
    return added


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
