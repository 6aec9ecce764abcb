from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import mysql.connector

# DATETIME columns hold UTC wall time; every session is pinned to it.
SESSION_TIME_ZONE = "+00:00"


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    charset: str = "utf8mb4"

    @classmethod
    def from_mapping(cls, values: Mapping) -> "DBConfig":
        """Build from the ``DB_CONFIG`` dict found in the settings modules."""
        return cls(
            host=str(values["host"]),
            port=int(values.get("port", 3306)),
            user=str(values["user"]),
            password=str(values.get("password", "")),
            database=str(values["database"]),
        )


class DatabaseConnection:
    """Process-wide factory for short-lived MySQL connections.

    Repositories open one connection per operation through ``db_cursor``.
    """

    _shared: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self.config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._shared is None:
            cls._shared = cls(config)
        return cls._shared

    def connect(self):
        cfg = self.config
        return mysql.connector.connect(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            database=cfg.database,
            charset=cfg.charset,
            time_zone=SESSION_TIME_ZONE,
            autocommit=False,
        )
