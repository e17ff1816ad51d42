from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.constants import DEFAULT_SETTING_CATEGORY
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Setting
from .repository import SettingRepository


def _to_setting(r: Dict[str, Any]) -> Setting:
    return Setting(
        key=r["setting_key"],
        value=r["setting_value"],
        description=r.get("description"),
        category=r.get("category") or DEFAULT_SETTING_CATEGORY,
        is_public=bool(r.get("is_public")),
    )


class MySQLSettingRepository(SettingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[Setting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT setting_key, setting_value, description, category, is_public
                FROM settings
                WHERE setting_key=%s
                """,
                (key,),
            )
            r = fetchone(cur)
            return _to_setting(r) if r else None

    def list_public(self, *, category: Optional[str] = None) -> Sequence[Setting]:
        sql = """
            SELECT setting_key, setting_value, description, category, is_public
            FROM settings
            WHERE is_public=1
        """
        params: tuple = ()
        if category:
            sql += " AND category=%s"
            params = (category,)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY setting_key", params)
            return [_to_setting(r) for r in fetchall(cur)]

    def upsert(self, setting: Setting) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO settings(setting_key, setting_value, description, category, is_public)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    setting_value=VALUES(setting_value),
                    description=VALUES(description),
                    category=VALUES(category),
                    is_public=VALUES(is_public)
                """,
                (setting.key, setting.value, setting.description, setting.category, int(setting.is_public)),
            )

    def delete(self, key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM settings WHERE setting_key=%s", (key,))
            return cur.rowcount > 0
