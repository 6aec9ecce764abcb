from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Attendance


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: str, attendance_date: str) -> Optional[Attendance]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: str,
        attendance_date: str,
        check_in_time: datetime,
        qr_code_id: int,
    ) -> Attendance:
        """Insert a check-in.

        Must be atomic on (user_id, attendance_date): raises AlreadyCheckedInError
        when the user already checked in that day.
        """

        raise NotImplementedError

    def list_for_date(self, attendance_date: str) -> Sequence[Attendance]:
        """Check-ins for ``attendance_date``, most recent first."""

        raise NotImplementedError
