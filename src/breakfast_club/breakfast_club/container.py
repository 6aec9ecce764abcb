from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .business_day.factory import OrderWindowFactory
from .business_day.policy import BusinessCalendar
from .core.constants import DEFAULT_ORDER_END_HOUR, DEFAULT_ORDER_START_HOUR, DEFAULT_TIMEZONE
from .core.enums import OrderWindowPolicy
from .database.connection import DatabaseConnection, DBConfig
from .orders.mysql_order_repository import MySQLOrderRepository
from .orders.repository import OrderRepository
from .orders.service import OrderService
from .qrcodes.mysql_qr_repository import MySQLQRCodeRepository
from .qrcodes.repository import QRCodeRepository
from .qrcodes.service import QRCodeService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import ProfileService, TokenIdentityProvider


@dataclass(frozen=True)
class ServiceSettings:
    """Process-wide configuration, read once at startup and passed to constructors."""

    qr_secret: str
    auth_secret: str
    timezone: str = DEFAULT_TIMEZONE
    order_window_policy: str = OrderWindowPolicy.NEXT_DAY.value
    order_start_hour: int = DEFAULT_ORDER_START_HOUR
    order_end_hour: int = DEFAULT_ORDER_END_HOUR
    auth_algorithms: Sequence[str] = ("HS256",)
    auth_audience: Optional[str] = None
    admin_emails: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    orders_repo: OrderRepository
    attendance_repo: AttendanceRepository
    qr_repo: QRCodeRepository

    calendar: BusinessCalendar
    identity: TokenIdentityProvider
    profile_service: ProfileService
    order_service: OrderService
    attendance_service: AttendanceService
    qr_service: QRCodeService

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    users_repo: UserRepository,
    orders_repo: OrderRepository,
    attendance_repo: AttendanceRepository,
    qr_repo: QRCodeRepository,
    settings: ServiceSettings,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable[[], datetime] | None = None,
) -> Container:
    window = OrderWindowFactory(
        start_hour=settings.order_start_hour,
        end_hour=settings.order_end_hour,
    ).for_policy(settings.order_window_policy)
    calendar = BusinessCalendar(settings.timezone, window=window, clock=clock)

    return Container(
        conn=conn,
        users_repo=users_repo,
        orders_repo=orders_repo,
        attendance_repo=attendance_repo,
        qr_repo=qr_repo,
        calendar=calendar,
        identity=TokenIdentityProvider(
            users_repo,
            secret=settings.auth_secret,
            algorithms=settings.auth_algorithms,
            audience=settings.auth_audience,
            admin_emails=settings.admin_emails,
            clock=calendar.now,
        ),
        profile_service=ProfileService(users_repo, clock=calendar.now),
        order_service=OrderService(orders_repo, users_repo, calendar),
        attendance_service=AttendanceService(attendance_repo, qr_repo, users_repo, calendar),
        qr_service=QRCodeService(qr_repo, calendar, secret=settings.qr_secret),
    )


def build_container(*, db_config: dict, settings: ServiceSettings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return assemble(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        orders_repo=MySQLOrderRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        qr_repo=MySQLQRCodeRepository(conn),
        settings=settings,
    )
