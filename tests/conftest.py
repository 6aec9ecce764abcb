from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import pytest
from jose import jwt

from src.breakfast_club.breakfast_club.attendance.model import Attendance
from src.breakfast_club.breakfast_club.business_day.policy import BusinessCalendar
from src.breakfast_club.breakfast_club.container import ServiceSettings, assemble
from src.breakfast_club.breakfast_club.core.enums import OrderStatus
from src.breakfast_club.breakfast_club.core.exceptions import (
    AlreadyCheckedInError,
    ConflictError,
    DuplicateOrderError,
)
from src.breakfast_club.breakfast_club.orders.model import NewOrder, Order
from src.breakfast_club.breakfast_club.qrcodes.model import QRCode
from src.breakfast_club.breakfast_club.users.model import User

AUTH_SECRET = "test-auth-secret"
QR_SECRET = "test-qr-secret"
TZ = "America/New_York"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class InMemoryUsers:
    def __init__(self, users: Iterable[User] = ()):
        self.by_id: Dict[str, User] = {u.uid: u for u in users}

    def get_by_id(self, uid: str) -> Optional[User]:
        return self.by_id.get(uid)

    def get_many(self, uids):
        return {uid: self.by_id[uid] for uid in set(uids) if uid in self.by_id}

    def create_user(self, user: User) -> User:
        return self.by_id.setdefault(user.uid, user)

    def touch_last_login(self, uid: str, at: datetime) -> None:
        self.by_id[uid] = replace(self.by_id[uid], last_login_at=at)

    def update_profile(self, uid, *, display_name, phone_number, dietary_restrictions, updated_at) -> bool:
        if uid not in self.by_id:
            return False
        self.by_id[uid] = replace(
            self.by_id[uid],
            display_name=display_name,
            phone_number=phone_number,
            dietary_restrictions=list(dietary_restrictions),
            updated_at=updated_at,
        )
        return True


class InMemoryOrders:
    """Mirrors the UNIQUE (user_id, order_date) key of the real table."""

    def __init__(self):
        self.by_id: Dict[int, Order] = {}
        self._id = 0

    def get_by_id(self, order_id: int) -> Optional[Order]:
        return self.by_id.get(int(order_id))

    def get_for_user_and_date(self, user_id: str, order_date: str) -> Optional[Order]:
        for o in self.by_id.values():
            if o.user_id == user_id and o.order_date == order_date:
                return o
        return None

    def create_order(self, *, user_id: str, order_date: str, order: NewOrder, created_at: datetime) -> Order:
        if self.get_for_user_and_date(user_id, order_date):
            raise DuplicateOrderError("You already have an order for this date")
        self._id += 1
        rec = Order(
            order_id=self._id,
            user_id=user_id,
            order_date=order_date,
            food_type=order.food_type,
            with_potatoes=order.with_potatoes,
            with_cheese=order.with_cheese,
            dietary_notes=order.dietary_notes,
            special_requests=order.special_requests,
            created_at=created_at,
            status=OrderStatus.PENDING,
        )
        self.by_id[rec.order_id] = rec
        return rec

    def list_for_date(self, order_date: str, *, status=None) -> List[Order]:
        items = [o for o in self.by_id.values() if o.order_date == order_date]
        if status is not None:
            items = [o for o in items if o.status == status]
        return sorted(items, key=lambda o: o.created_at)

    def set_status(self, order_id: int, status: OrderStatus) -> bool:
        if order_id not in self.by_id:
            return False
        self.by_id[order_id] = replace(self.by_id[order_id], status=status)
        return True


class InMemoryQRCodes:
    """Mirrors the UNIQUE active-per-date key of the real table."""

    def __init__(self):
        self.by_id: Dict[int, QRCode] = {}
        self._id = 0

    def get_active_for_date(self, code_date: str) -> Optional[QRCode]:
        for qr in self.by_id.values():
            if qr.code_date == code_date and qr.is_active:
                return qr
        return None

    def find_active_by_code(self, code: str, code_date: str) -> Optional[QRCode]:
        qr = self.get_active_for_date(code_date)
        return qr if qr and qr.code == code else None

    def create_code(self, *, code_date, code, created_by, created_at, expires_at) -> QRCode:
        if self.get_active_for_date(code_date):
            raise ConflictError(f"An active QR code already exists for {code_date}")
        self._id += 1
        qr = QRCode(
            qr_code_id=self._id,
            code_date=code_date,
            code=code,
            created_by=created_by,
            is_active=True,
            created_at=created_at,
            expires_at=expires_at,
        )
        self.by_id[qr.qr_code_id] = qr
        return qr

    def deactivate_before(self, code_date: str) -> int:
        changed = 0
        for qr_id, qr in list(self.by_id.items()):
            if qr.is_active and qr.code_date < code_date:
                self.by_id[qr_id] = replace(qr, is_active=False)
                changed += 1
        return changed


class InMemoryAttendance:
    """Mirrors the UNIQUE (user_id, attendance_date) key of the real table."""

    def __init__(self):
        self.by_user_date: Dict[tuple, Attendance] = {}
        self._id = 0

    def get_for_user_and_date(self, user_id: str, attendance_date: str) -> Optional[Attendance]:
        return self.by_user_date.get((user_id, attendance_date))

    def create_checkin(self, *, user_id, attendance_date, check_in_time, qr_code_id) -> Attendance:
        if (user_id, attendance_date) in self.by_user_date:
            raise AlreadyCheckedInError("You have already checked in today")
        self._id += 1
        rec = Attendance(
            attendance_id=self._id,
            user_id=user_id,
            attendance_date=attendance_date,
            check_in_time=check_in_time,
            qr_code_id=qr_code_id,
        )
        self.by_user_date[(user_id, attendance_date)] = rec
        return rec

    def list_for_date(self, attendance_date: str) -> List[Attendance]:
        items = [a for a in self.by_user_date.values() if a.attendance_date == attendance_date]
        return sorted(items, key=lambda a: a.check_in_time, reverse=True)


def make_user(uid: str = "u1", *, admin: bool = False, name: str = "Alice", email: str = "") -> User:
    at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    return User(
        uid=uid,
        email=email or f"{uid}@example.com",
        display_name=name,
        phone_number=None,
        created_at=at,
        updated_at=at,
        last_login_at=at,
        is_admin=admin,
    )


def make_token(uid: str, *, email: str = "", name: str = "", secret: str = AUTH_SECRET) -> str:
    claims = {"sub": uid}
    if email:
        claims["email"] = email
    if name:
        claims["name"] = name
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def fixed_now() -> datetime:
    # 2024-06-01 10:30 in New York (EDT, UTC-4)
    return datetime(2024, 6, 1, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def calendar(clock) -> BusinessCalendar:
    return BusinessCalendar(TZ, clock=clock)


@pytest.fixture
def admin_user() -> User:
    return make_user("admin-1", admin=True, name="Admin", email="admin@example.com")


@pytest.fixture
def member() -> User:
    return make_user("u1", name="Alice", email="alice@example.com")


@pytest.fixture
def users_repo(admin_user, member) -> InMemoryUsers:
    return InMemoryUsers([admin_user, member])


@pytest.fixture
def orders_repo() -> InMemoryOrders:
    return InMemoryOrders()


@pytest.fixture
def qr_repo() -> InMemoryQRCodes:
    return InMemoryQRCodes()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def settings() -> ServiceSettings:
    return ServiceSettings(
        qr_secret=QR_SECRET,
        auth_secret=AUTH_SECRET,
        timezone=TZ,
        admin_emails=("admin@example.com",),
    )


@pytest.fixture
def container(users_repo, orders_repo, attendance_repo, qr_repo, settings, clock):
    return assemble(
        users_repo=users_repo,
        orders_repo=orders_repo,
        attendance_repo=attendance_repo,
        qr_repo=qr_repo,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.breakfast_club.breakfast_club.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_header():
    def _header(user: User) -> dict:
        return {"Authorization": f"Bearer {make_token(user.uid, email=user.email, name=user.display_name)}"}

    return _header
