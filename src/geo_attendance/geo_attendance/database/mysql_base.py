from __future__ import annotations

import json
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..geofences.model import Coordinate
from .connection import DatabaseConnection

DUPLICATE_ENTRY_ERRNO = 1062


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json(value: Any) -> Any:
    """Decode a JSON column; mysql-connector returns JSON as str or bytes."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else None
    return value


def dump_json(value: Any) -> Optional[str]:
    return None if value is None else json.dumps(value)


def coordinate_from_column(value: Any) -> Optional[Coordinate]:
    return Coordinate.from_mapping(load_json(value))


def coordinate_to_column(value: Optional[Coordinate]) -> Optional[str]:
    return dump_json(value.to_dict()) if value else None


def decimal_or_none(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))
