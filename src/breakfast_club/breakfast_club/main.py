from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import envelope
from .container import Container, ServiceSettings, build_container
from .database.bootstrap import apply_schema, list_tables
from .orders.controller import register as register_orders
from .qrcodes.controller import register as register_qrcodes
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def _split_csv(value) -> tuple:
    if not value:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return tuple(v.strip() for v in str(value).split(",") if v.strip())


def settings_from_module(settings) -> ServiceSettings:
    return ServiceSettings(
        qr_secret=str(getattr(settings, "QR_SECRET")),
        auth_secret=str(getattr(settings, "AUTH_SECRET")),
        timezone=str(getattr(settings, "BUSINESS_TIMEZONE", "America/New_York")),
        order_window_policy=str(getattr(settings, "ORDER_WINDOW_POLICY", "next_day")),
        order_start_hour=int(getattr(settings, "ORDER_START_HOUR", 9)),
        order_end_hour=int(getattr(settings, "ORDER_END_HOUR", 21)),
        auth_algorithms=_split_csv(getattr(settings, "AUTH_ALGORITHM", "HS256")),
        auth_audience=getattr(settings, "AUTH_AUDIENCE", None) or None,
        admin_emails=_split_csv(getattr(settings, "ADMIN_EMAILS", "")),
    )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return envelope(e.code or 500, message=e.description)

    @app.errorhandler(Exception)
    def unhandled_error(e: Exception):
        logger.exception("Unhandled error")
        return envelope(500, message="Server error")

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return envelope()


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(db_config=db_config, settings=settings_from_module(settings))

    app.extensions["breakfast_club"] = container

    register_users(app, container)
    register_orders(app, container)
    register_attendance(app, container)
    register_qrcodes(app, container)
    _register_error_handlers(app)

    return app
