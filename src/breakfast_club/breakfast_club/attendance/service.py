from __future__ import annotations

import hmac
import logging
import re
from datetime import datetime
from typing import List, Optional

from ..business_day.policy import BusinessCalendar
from ..common.datetime_utils import parse_date_key
from ..core.constants import QR_CODE_LENGTH
from ..core.exceptions import AlreadyCheckedInError, CodeExpiredError, InvalidCodeError
from ..qrcodes.repository import QRCodeRepository
from ..users.model import User, summarize
from ..users.repository import UserRepository
from .model import Attendance, AttendanceEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_CODE_RE = re.compile(rf"[0-9a-f]{{{QR_CODE_LENGTH}}}")


class AttendanceService:
    """Use case: redeem the daily QR code as a check-in, and list who came."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        qr_codes: QRCodeRepository,
        users: UserRepository,
        calendar: BusinessCalendar,
    ):
        self._attendance = attendance
        self._qr_codes = qr_codes
        self._users = users
        self._calendar = calendar

    def record_check_in(self, user: User, presented_code: Optional[str], *, now: Optional[datetime] = None) -> Attendance:
        now = now or self._calendar.now()
        today = self._calendar.business_date(now)

        code = (presented_code or "").strip() if isinstance(presented_code, str) else ""
        if not code:
            raise InvalidCodeError("QR code is required")

        if not _CODE_RE.fullmatch(code):
            logger.warning("Malformed QR code presented by %s", user.uid)
            raise InvalidCodeError("Invalid or expired QR code")

        qr = self._qr_codes.find_active_by_code(code, today)
        if not qr or not hmac.compare_digest(qr.code.encode("ascii"), code.encode("ascii")):
            logger.warning("Unrecognized QR code presented by %s", user.uid)
            raise InvalidCodeError("Invalid or expired QR code")
        if qr.is_expired(now):
            raise CodeExpiredError("QR code has expired")

        if self._attendance.get_for_user_and_date(user.uid, today):
            raise AlreadyCheckedInError("You have already checked in today")

        record = self._attendance.create_checkin(
            user_id=user.uid,
            attendance_date=today,
            check_in_time=now,
            qr_code_id=qr.qr_code_id,
        )
        logger.info("User %s checked in for %s with QR %s", user.uid, today, qr.qr_code_id)
        return record

    def list_attendance(self, attendance_date: Optional[str] = None) -> List[AttendanceEntry]:
        attendance_date = parse_date_key(attendance_date) if attendance_date else self._calendar.business_date()
        rows = sorted(
            self._attendance.list_for_date(attendance_date),
            key=lambda a: (a.check_in_time, a.attendance_id),
            reverse=True,
        )
        users = self._users.get_many(a.user_id for a in rows)
        return [AttendanceEntry(attendance=a, user=summarize(users.get(a.user_id), a.user_id)) for a in rows]
