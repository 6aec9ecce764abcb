from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from conftest import make_user

from src.breakfast_club.breakfast_club.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.breakfast_club.breakfast_club.core.enums import FoodType, OrderStatus
from src.breakfast_club.breakfast_club.core.exceptions import (
    AlreadyCheckedInError,
    ConflictError,
    DuplicateOrderError,
)
from src.breakfast_club.breakfast_club.database.bootstrap import _iter_sql_statements, _prepare_script
from src.breakfast_club.breakfast_club.database.mysql_base import is_duplicate_key, to_db_datetime
from src.breakfast_club.breakfast_club.orders.model import NewOrder
from src.breakfast_club.breakfast_club.orders.mysql_order_repository import MySQLOrderRepository
from src.breakfast_club.breakfast_club.qrcodes.mysql_qr_repository import MySQLQRCodeRepository
from src.breakfast_club.breakfast_club.users.mysql_user_repository import MySQLUserRepository

NOW = datetime(2024, 6, 1, 14, 30, tzinfo=timezone.utc)


def duplicate_entry() -> IntegrityError:
    return IntegrityError(msg="Duplicate entry for key", errno=errorcode.ER_DUP_ENTRY)


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.lastrowid = 7
        self.rowcount = 1

    def execute(self, sql, params=()):
        self._conn.executed.append((" ".join(sql.split()), params))
        if self._conn.fail_with is not None:
            raise self._conn.fail_with

    def fetchone(self):
        return self._conn.rows[0] if self._conn.rows else None

    def fetchall(self):
        return list(self._conn.rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, rows=(), fail_with=None):
        self.rows = list(rows)
        self.fail_with = fail_with
        self.executed = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnFactory:
    """Stands in for DatabaseConnection: hands out scripted connections in order."""

    def __init__(self, *connections):
        self._queue = list(connections)
        self.used = []

    def connect(self):
        conn = self._queue.pop(0) if self._queue else FakeConnection()
        self.used.append(conn)
        return conn


def test_is_duplicate_key_only_matches_dup_entry():
    assert is_duplicate_key(duplicate_entry())
    assert not is_duplicate_key(IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2))
    assert not is_duplicate_key(RuntimeError("boom"))


def test_to_db_datetime_is_naive_utc():
    est = datetime(2024, 6, 1, 10, 30, tzinfo=timezone.utc).astimezone()
    assert to_db_datetime(est) == datetime(2024, 6, 1, 10, 30)


def test_order_insert_duplicate_becomes_domain_conflict():
    conn = FakeConnection(fail_with=duplicate_entry())
    repo = MySQLOrderRepository(FakeConnFactory(conn))

    with pytest.raises(DuplicateOrderError):
        repo.create_order(user_id="u1", order_date="2024-06-02", order=NewOrder(FoodType.PLAIN), created_at=NOW)

    assert conn.rolled_back
    assert not conn.committed
    assert conn.closed


def test_order_insert_other_errors_propagate():
    conn = FakeConnection(fail_with=RuntimeError("connection lost"))
    repo = MySQLOrderRepository(FakeConnFactory(conn))

    with pytest.raises(RuntimeError):
        repo.create_order(user_id="u1", order_date="2024-06-02", order=NewOrder(FoodType.PLAIN), created_at=NOW)
    assert conn.rolled_back


def test_order_insert_commits_and_returns_pending():
    conn = FakeConnection()
    repo = MySQLOrderRepository(FakeConnFactory(conn))

    order = repo.create_order(
        user_id="u1",
        order_date="2024-06-02",
        order=NewOrder(FoodType.WRAP, with_cheese=True),
        created_at=NOW,
    )

    assert order.order_id == 7
    assert order.status == OrderStatus.PENDING
    assert conn.committed
    sql, params = conn.executed[0]
    assert sql.startswith("INSERT INTO daily_orders")
    assert params[:5] == ("u1", "2024-06-02", "wrap", 0, 1)
    assert params[7] == datetime(2024, 6, 1, 14, 30)


def test_order_rows_are_mapped():
    row = {
        "order_id": 3,
        "user_id": "u1",
        "order_date": date(2024, 6, 2),
        "food_type": "everything",
        "with_potatoes": 1,
        "with_cheese": 0,
        "dietary_notes": None,
        "special_requests": "extra napkins",
        "created_at": datetime(2024, 6, 1, 14, 30),
        "status": "confirmed",
    }
    repo = MySQLOrderRepository(FakeConnFactory(FakeConnection(rows=[row])))

    orders = repo.list_for_date("2024-06-02", status=OrderStatus.CONFIRMED)

    assert len(orders) == 1
    assert orders[0].order_date == "2024-06-02"
    assert orders[0].food_type == FoodType.EVERYTHING
    assert orders[0].with_potatoes is True
    assert orders[0].dietary_notes == ""
    assert orders[0].created_at == NOW


def test_attendance_insert_duplicate_becomes_already_checked_in():
    conn = FakeConnection(fail_with=duplicate_entry())
    repo = MySQLAttendanceRepository(FakeConnFactory(conn))

    with pytest.raises(AlreadyCheckedInError):
        repo.create_checkin(user_id="u1", attendance_date="2024-06-01", check_in_time=NOW, qr_code_id=1)
    assert conn.rolled_back


def test_qr_insert_duplicate_becomes_conflict():
    conn = FakeConnection(fail_with=duplicate_entry())
    repo = MySQLQRCodeRepository(FakeConnFactory(conn))

    with pytest.raises(ConflictError):
        repo.create_code(code_date="2024-06-01", code="a" * 64, created_by="admin-1", created_at=NOW, expires_at=NOW)
    assert conn.rolled_back


def test_user_insert_race_returns_existing_record():
    stored = {
        "uid": "u1",
        "email": "alice@example.com",
        "display_name": "Alice",
        "phone_number": None,
        "dietary_restrictions": '["vegan"]',
        "is_admin": 0,
        "created_at": datetime(2024, 5, 1, 12, 0),
        "updated_at": datetime(2024, 5, 1, 12, 0),
        "last_login_at": datetime(2024, 5, 1, 12, 0),
    }
    factory = FakeConnFactory(FakeConnection(fail_with=duplicate_entry()), FakeConnection(rows=[stored]))
    repo = MySQLUserRepository(factory)

    user = repo.create_user(make_user("u1", name="Someone Else"))

    assert user.display_name == "Alice"
    assert user.dietary_restrictions == ["vegan"]
    assert factory.used[0].rolled_back


def test_schema_splitter_drops_database_statements():
    sql = "CREATE DATABASE x;\nUSE x;\nCREATE TABLE a (v VARCHAR(3) DEFAULT ';');\nCREATE TABLE b (id INT);\n"
    statements = list(_iter_sql_statements(_prepare_script(sql)))

    assert statements == ["CREATE TABLE a (v VARCHAR(3) DEFAULT ';')", "CREATE TABLE b (id INT)"]
