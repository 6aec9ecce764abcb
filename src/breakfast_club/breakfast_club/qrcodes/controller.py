from __future__ import annotations

import io

from flask import Flask, send_file

from ..common.datetime_utils import isoformat_utc
from ..common.web import current_user, envelope, handle_errors, make_login_required
from ..container import Container
from .model import QRCode


def qr_json(qr: QRCode) -> dict:
    return {
        "id": qr.qr_code_id,
        "date": qr.code_date,
        "code": qr.code,
        "createdBy": qr.created_by,
        "isActive": qr.is_active,
        "createdAt": isoformat_utc(qr.created_at),
        "expiresAt": isoformat_utc(qr.expires_at),
    }


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.identity)
    qr_service = container.qr_service

    @app.route("/qr/generate", methods=["POST"], endpoint="generate_qr")
    @handle_errors
    @login_required
    def generate_qr():
        result = qr_service.issue_for_today(current_user())
        if result.created:
            return envelope(201, message="QR code generated successfully", qrCode=qr_json(result.qr_code))
        return envelope(message="QR code already exists for today", qrCode=qr_json(result.qr_code))

    @app.route("/qr/today", methods=["GET"], endpoint="today_qr")
    @handle_errors
    @login_required
    def today_qr():
        return envelope(qrCode=qr_json(qr_service.get_active_for_today(current_user())))

    @app.route("/qr/today/image", methods=["GET"], endpoint="today_qr_image")
    @handle_errors
    @login_required
    def today_qr_image():
        qr = qr_service.get_active_for_today(current_user())
        return send_file(
            io.BytesIO(qr_service.render_png(qr)),
            mimetype="image/png",
            download_name=f"checkin-{qr.code_date}.png",
        )
