from __future__ import annotations

from flask import Flask, request
from PIL import Image, UnidentifiedImageError

from ..common.datetime_utils import isoformat_utc
from ..common.web import current_user, envelope, handle_errors, json_body, make_login_required
from ..container import Container
from ..core.exceptions import ValidationError
from .model import Attendance, AttendanceEntry


def attendance_json(record: Attendance) -> dict:
    return {
        "id": record.attendance_id,
        "userId": record.user_id,
        "date": record.attendance_date,
        "checkInTime": isoformat_utc(record.check_in_time),
        "qrCodeId": record.qr_code_id,
    }


def entry_json(entry: AttendanceEntry) -> dict:
    return {
        **attendance_json(entry.attendance),
        "user": {"id": entry.user.uid, "displayName": entry.user.display_name, "email": entry.user.email},
    }


def _zbar_decode(img: Image.Image) -> list:
    # pyzbar loads the native zbar library on import.
    from pyzbar.pyzbar import decode as pyzbar_decode

    return pyzbar_decode(img)


def _decode_uploaded_qr() -> str:
    """Decode the first QR code found in the uploaded ``image`` file."""
    if "image" not in request.files:
        raise ValidationError("Image file is required")
    try:
        img = Image.open(request.files["image"].stream).convert("RGB")
    except UnidentifiedImageError:
        raise ValidationError("Uploaded file is not an image")

    decoded = _zbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in the image")
    return decoded[0].data.decode("utf-8").strip()


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.identity)
    attendance = container.attendance_service

    @app.route("/attendance", methods=["GET"], endpoint="list_attendance")
    @handle_errors
    @login_required
    def list_attendance():
        entries = attendance.list_attendance(request.args.get("date") or None)
        return envelope(attendance=[entry_json(e) for e in entries], totalCount=len(entries))

    @app.route("/qr/scan", methods=["POST"], endpoint="scan_qr")
    @handle_errors
    @login_required
    def scan_qr():
        record = attendance.record_check_in(current_user(), json_body().get("qrCode"))
        return envelope(201, message="Check-in successful!", attendance=attendance_json(record))

    @app.route("/qr/scan/image", methods=["POST"], endpoint="scan_qr_image")
    @handle_errors
    @login_required
    def scan_qr_image():
        record = attendance.record_check_in(current_user(), _decode_uploaded_qr())
        return envelope(201, message="Check-in successful!", attendance=attendance_json(record))
