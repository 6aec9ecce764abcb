from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..common.timestamps import normalize_timestamp
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, to_db_datetime
from .model import User
from .repository import UserRepository

_COLUMNS = (
    "uid, email, display_name, phone_number, dietary_restrictions, is_admin, "
    "created_at, updated_at, last_login_at"
)


def _load_restrictions(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    try:
        items = json.loads(value)
    except (TypeError, ValueError):
        return []
    return [str(v) for v in items] if isinstance(items, list) else []


def _row_to_user(row: Dict[str, Any]) -> User:
    return User(
        uid=row["uid"],
        email=row.get("email") or "",
        display_name=row.get("display_name") or "",
        phone_number=row.get("phone_number"),
        dietary_restrictions=_load_restrictions(row.get("dietary_restrictions")),
        is_admin=bool(row.get("is_admin", False)),
        created_at=normalize_timestamp(row["created_at"]),
        updated_at=normalize_timestamp(row["updated_at"]),
        last_login_at=normalize_timestamp(row["last_login_at"]),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, uid: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE uid=%s", (uid,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_many(self, uids: Iterable[str]) -> Dict[str, User]:
        uids = sorted(set(uids))
        if not uids:
            return {}
        placeholders = ",".join(["%s"] * len(uids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE uid IN ({placeholders})", tuple(uids))
            return {u.uid: u for u in (_row_to_user(r) for r in fetchall(cur))}

    def create_user(self, user: User) -> User:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO users({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)",
                    (
                        user.uid,
                        user.email,
                        user.display_name,
                        user.phone_number,
                        json.dumps(list(user.dietary_restrictions)),
                        1 if user.is_admin else 0,
                        to_db_datetime(user.created_at),
                        to_db_datetime(user.updated_at),
                        to_db_datetime(user.last_login_at),
                    ),
                )
        except Exception as e:
            if not is_duplicate_key(e):
                raise
            existing = self.get_by_id(user.uid)
            if existing is None:
                raise
            return existing
        return user

    def touch_last_login(self, uid: str, at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET last_login_at=%s WHERE uid=%s", (to_db_datetime(at), uid))

    def update_profile(
        self,
        uid: str,
        *,
        display_name: str,
        phone_number: Optional[str],
        dietary_restrictions: List[str],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET display_name=%s, phone_number=%s, dietary_restrictions=%s, updated_at=%s
                WHERE uid=%s
                """,
                (display_name, phone_number, json.dumps(dietary_restrictions), to_db_datetime(updated_at), uid),
            )
            return cur.rowcount > 0
