from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.timestamps import normalize_timestamp
from ..core.exceptions import AlreadyCheckedInError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_mysql_date,
    to_db_datetime,
)
from .model import Attendance
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, user_id, attendance_date, check_in_time, qr_code_id"


def _row_to_attendance(r: Dict[str, Any]) -> Attendance:
    return Attendance(
        attendance_id=int(r["attendance_id"]),
        user_id=r["user_id"],
        attendance_date=normalize_mysql_date(r["attendance_date"]),
        check_in_time=normalize_timestamp(r["check_in_time"]),
        qr_code_id=int(r["qr_code_id"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: str, attendance_date: str) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE user_id=%s AND attendance_date=%s",
                (user_id, attendance_date),
            )
            r = fetchone(cur)
            return _row_to_attendance(r) if r else None

    def create_checkin(
        self,
        *,
        user_id: str,
        attendance_date: str,
        check_in_time: datetime,
        qr_code_id: int,
    ) -> Attendance:
        # uq_attendance_user_date makes the insert itself the uniqueness check.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(user_id, attendance_date, check_in_time, qr_code_id)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (user_id, attendance_date, to_db_datetime(check_in_time), int(qr_code_id)),
                )
                attendance_id = int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise AlreadyCheckedInError("You have already checked in today")
            raise

        return Attendance(
            attendance_id=attendance_id,
            user_id=user_id,
            attendance_date=attendance_date,
            check_in_time=check_in_time,
            qr_code_id=int(qr_code_id),
        )

    def list_for_date(self, attendance_date: str) -> Sequence[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE attendance_date=%s
                ORDER BY check_in_time DESC, attendance_id DESC
                """,
                (attendance_date,),
            )
            return [_row_to_attendance(r) for r in fetchall(cur)]
