from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..common.timestamps import normalize_timestamp
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchone,
    is_duplicate_key,
    normalize_mysql_date,
    to_db_datetime,
)
from .model import QRCode
from .repository import QRCodeRepository

_COLUMNS = "qr_code_id, code_date, code, created_by, is_active, created_at, expires_at"


def _row_to_qr(r: Dict[str, Any]) -> QRCode:
    return QRCode(
        qr_code_id=int(r["qr_code_id"]),
        code_date=normalize_mysql_date(r["code_date"]),
        code=r["code"],
        created_by=r["created_by"],
        is_active=bool(r["is_active"]),
        created_at=normalize_timestamp(r["created_at"]),
        expires_at=normalize_timestamp(r["expires_at"]),
    )


class MySQLQRCodeRepository(QRCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_for_date(self, code_date: str) -> Optional[QRCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM qr_codes WHERE code_date=%s AND is_active=1 ORDER BY qr_code_id LIMIT 1",
                (code_date,),
            )
            r = fetchone(cur)
            return _row_to_qr(r) if r else None

    def find_active_by_code(self, code: str, code_date: str) -> Optional[QRCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM qr_codes WHERE code=%s AND code_date=%s AND is_active=1 LIMIT 1",
                (code, code_date),
            )
            r = fetchone(cur)
            return _row_to_qr(r) if r else None

    def create_code(
        self,
        *,
        code_date: str,
        code: str,
        created_by: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> QRCode:
        # uq_qr_active_date allows a single active row per date.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO qr_codes(code_date, code, created_by, is_active, created_at, expires_at)
                    VALUES(%s,%s,%s,1,%s,%s)
                    """,
                    (code_date, code, created_by, to_db_datetime(created_at), to_db_datetime(expires_at)),
                )
                qr_code_id = int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictError(f"An active QR code already exists for {code_date}")
            raise

        return QRCode(
            qr_code_id=qr_code_id,
            code_date=code_date,
            code=code,
            created_by=created_by,
            is_active=True,
            created_at=created_at,
            expires_at=expires_at,
        )

    def deactivate_before(self, code_date: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE qr_codes SET is_active=0 WHERE is_active=1 AND code_date<%s", (code_date,))
            return int(cur.rowcount)
