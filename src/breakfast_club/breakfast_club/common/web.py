"""Shared Flask helpers: the response envelope, bearer auth and error boundary.

Every JSON endpoint answers ``{"success": bool, "message"?: str, ...payload}``.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import g, jsonify, request

from ..core.exceptions import AuthenticationError, DomainError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Server error"


def envelope(status: int = 200, *, message: Optional[str] = None, **payload: Any):
    body: dict = {"success": 200 <= status < 300}
    if message:
        body["message"] = message
    body.update(payload)
    return jsonify(body), status


def error_envelope(err: DomainError):
    return envelope(err.status_code, message=err.message or err.__class__.__name__)


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def current_user():
    return g.current_user


def handle_errors(view):
    """Boundary: domain errors -> envelope with their status, anything else -> generic 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return error_envelope(e)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return envelope(500, message=GENERIC_ERROR_MESSAGE)

    return wrapper


def make_login_required(identity):
    """Build the ``login_required`` decorator around an identity provider."""

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                g.current_user = identity.verify(bearer_token())
            except AuthenticationError as e:
                return error_envelope(e)
            return view(*args, **kwargs)

        return wrapper

    return login_required
