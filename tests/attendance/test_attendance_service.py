from __future__ import annotations

import unicodedata
from datetime import timedelta

import pytest

from conftest import QR_SECRET, InMemoryQRCodes, make_user

from src.breakfast_club.breakfast_club.attendance.service import AttendanceService
from src.breakfast_club.breakfast_club.core.exceptions import (
    AlreadyCheckedInError,
    CodeExpiredError,
    InvalidCodeError,
    ValidationError,
)
from src.breakfast_club.breakfast_club.qrcodes.service import QRCodeService


@pytest.fixture
def qr_service(qr_repo, calendar):
    return QRCodeService(qr_repo, calendar, secret=QR_SECRET)


@pytest.fixture
def service(attendance_repo, qr_repo, users_repo, calendar):
    return AttendanceService(attendance_repo, qr_repo, users_repo, calendar)


@pytest.fixture
def todays_code(qr_service, admin_user):
    return qr_service.issue_for_today(admin_user).qr_code


def test_check_in_records_code_and_time(service, member, todays_code, fixed_now):
    record = service.record_check_in(member, todays_code.code)

    assert record.user_id == "u1"
    assert record.attendance_date == "2024-06-01"
    assert record.qr_code_id == todays_code.qr_code_id
    assert record.check_in_time == fixed_now


def test_check_in_accepts_surrounding_whitespace(service, member, todays_code):
    assert service.record_check_in(member, f"  {todays_code.code}\n").qr_code_id == todays_code.qr_code_id


@pytest.mark.parametrize("presented", [None, "", "   ", 42])
def test_blank_code_is_invalid(service, member, attendance_repo, todays_code, presented):
    with pytest.raises(InvalidCodeError):
        service.record_check_in(member, presented)
    assert attendance_repo.by_user_date == {}


def test_unknown_code_is_rejected_without_record(service, member, attendance_repo, todays_code):
    with pytest.raises(InvalidCodeError, match="Invalid or expired QR code"):
        service.record_check_in(member, "f" * 64)
    assert attendance_repo.by_user_date == {}


def test_yesterdays_code_does_not_match_today(service, qr_service, admin_user, member, fixed_now):
    yesterday = qr_service.issue_for_today(admin_user, now=fixed_now - timedelta(days=1)).qr_code

    with pytest.raises(InvalidCodeError):
        service.record_check_in(member, yesterday.code)


def test_expired_code_rejected_even_while_active(service, qr_repo, member, fixed_now, attendance_repo):
    stale = qr_repo.create_code(
        code_date="2024-06-01",
        code="a" * 64,
        created_by="admin-1",
        created_at=fixed_now - timedelta(hours=2),
        expires_at=fixed_now - timedelta(minutes=1),
    )
    assert stale.is_active

    with pytest.raises(CodeExpiredError):
        service.record_check_in(member, stale.code)
    assert attendance_repo.by_user_date == {}


def test_second_check_in_same_day_is_rejected(service, member, todays_code, fixed_now):
    service.record_check_in(member, todays_code.code)

    with pytest.raises(AlreadyCheckedInError):
        service.record_check_in(member, todays_code.code, now=fixed_now + timedelta(hours=1))


def test_store_conflict_surfaces_as_already_checked_in(attendance_repo, qr_repo, users_repo, calendar, member, todays_code):
    class RacingAttendance(type(attendance_repo)):
        def get_for_user_and_date(self, user_id, attendance_date):
            return None

    repo = RacingAttendance()
    service = AttendanceService(repo, qr_repo, users_repo, calendar)
    service.record_check_in(member, todays_code.code)

    with pytest.raises(AlreadyCheckedInError):
        service.record_check_in(member, todays_code.code)
    assert len(repo.by_user_date) == 1


def test_list_attendance_newest_first_with_unknown_users(service, users_repo, todays_code, fixed_now):
    bob = make_user("bob", name="Bob", email="bob@example.com")
    users_repo.by_id[bob.uid] = bob

    service.record_check_in(make_user("u1"), todays_code.code, now=fixed_now)
    service.record_check_in(bob, todays_code.code, now=fixed_now + timedelta(minutes=10))
    service.record_check_in(make_user("ghost"), todays_code.code, now=fixed_now + timedelta(minutes=5))

    entries = service.list_attendance()

    assert [e.attendance.user_id for e in entries] == ["bob", "ghost", "u1"]
    assert entries[0].user.email == "bob@example.com"
    assert entries[1].user.display_name == "Unknown User"
    assert entries[1].user.email == "Unknown Email"
    assert entries[2].user.display_name == "Alice"


def test_list_attendance_for_other_date(service):
    assert service.list_attendance("2024-05-31") == []
    with pytest.raises(ValidationError):
        service.list_attendance("yesterday")


class CollatingQRCodes(InMemoryQRCodes):
    """Matches codes ignoring case and accents, like MySQL's default utf8mb4 collation."""

    @staticmethod
    def _fold(text):
        return "".join(c for c in unicodedata.normalize("NFKD", text) if not unicodedata.combining(c)).casefold()

    def find_active_by_code(self, code, code_date):
        qr = self.get_active_for_date(code_date)
        return qr if qr and self._fold(qr.code) == self._fold(code) else None


@pytest.fixture
def collating_repo(fixed_now):
    repo = CollatingQRCodes()
    repo.create_code(
        code_date="2024-06-01",
        code="ae" + "0" * 62,
        created_by="admin-1",
        created_at=fixed_now,
        expires_at=fixed_now + timedelta(hours=8),
    )
    return repo


@pytest.mark.parametrize(
    "presented",
    [
        "áé" + "0" * 62,
        "AE" + "0" * 62,
        "ae" + "0" * 61,
        "ae" + "0" * 63,
        "ae" + "0" * 61 + "g",
    ],
)
def test_near_miss_codes_are_invalid(collating_repo, attendance_repo, users_repo, calendar, member, presented):
    service = AttendanceService(attendance_repo, collating_repo, users_repo, calendar)

    with pytest.raises(InvalidCodeError, match="Invalid or expired QR code"):
        service.record_check_in(member, presented)
    assert attendance_repo.by_user_date == {}


def test_exact_code_still_matches_collating_store(collating_repo, attendance_repo, users_repo, calendar, member):
    service = AttendanceService(attendance_repo, collating_repo, users_repo, calendar)

    assert service.record_check_in(member, "ae" + "0" * 62).qr_code_id == 1
