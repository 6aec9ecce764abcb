from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..users.model import UserSummary


@dataclass(frozen=True)
class Attendance:
    """Domain entity: a check-in. Created once, never changed."""

    attendance_id: int
    user_id: str
    attendance_date: str
    check_in_time: datetime
    qr_code_id: int


@dataclass(frozen=True)
class AttendanceEntry:
    """Read-model for listings (attendance joined with who checked in)."""

    attendance: Attendance
    user: UserSummary
