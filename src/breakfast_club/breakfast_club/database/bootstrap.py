"""Schema management helpers used on startup (``AUTO_INIT_DB``) and by scripts/."""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB_RE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DB_RE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def _config(db_config: dict) -> DBConfig:
    return DBConfig(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "breakfast_club")),
    )


@contextmanager
def _session(cfg: DBConfig, *, with_database: bool = True) -> Iterator:
    params = dict(host=cfg.host, port=cfg.port, user=cfg.user, password=cfg.password, use_pure=True)
    if with_database:
        params["database"] = cfg.database
    conn = mysql.connector.connect(**params)
    try:
        cur = conn.cursor()
        yield cur
        conn.commit()
    finally:
        conn.close()


def _prepare_script(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the script.
    sql = _USE_DB_RE.sub("", _CREATE_DB_RE.sub("", sql))
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside of quoted literals."""
    current: list[str] = []
    quote = None
    escaped = False

    for ch in sql:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote is not None:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            statement = "".join(current).strip()
            current = []
            if statement:
                yield statement
            continue
        current.append(ch)

    remainder = "".join(current).strip()
    if remainder:
        yield remainder


def ensure_database_exists(db_config: dict) -> None:
    cfg = _config(db_config)
    with _session(cfg, with_database=False) as cur:
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{cfg.database}` CHARACTER SET {cfg.charset} COLLATE utf8mb4_unicode_ci"
        )


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    script = _prepare_script(Path(schema_path).read_text(encoding="utf-8"))

    with _session(_config(db_config)) as cur:
        for statement in _iter_sql_statements(script):
            cur.execute(statement)
    logger.info("Applied schema %s", schema_path)


def set_admin_flag(db_config: dict, *, email: str, is_admin: bool = True) -> int:
    """Grant or revoke admin for every user registered with ``email``. Returns rows changed."""
    with _session(_config(db_config)) as cur:
        cur.execute(
            "UPDATE users SET is_admin=%s, updated_at=UTC_TIMESTAMP(3) WHERE email=%s",
            (1 if is_admin else 0, email.strip().lower()),
        )
        return int(cur.rowcount)


def list_tables(db_config: dict) -> list[str]:
    with _session(_config(db_config)) as cur:
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
