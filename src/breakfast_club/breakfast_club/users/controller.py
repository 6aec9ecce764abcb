from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import isoformat_utc
from ..common.web import current_user, envelope, handle_errors, json_body, make_login_required
from ..container import Container
from .model import User


def user_json(user: User) -> dict:
    return {
        "uid": user.uid,
        "email": user.email,
        "displayName": user.display_name,
        "phoneNumber": user.phone_number,
        "dietaryRestrictions": list(user.dietary_restrictions),
        "isAdmin": user.is_admin,
        "createdAt": isoformat_utc(user.created_at),
        "updatedAt": isoformat_utc(user.updated_at),
        "lastLoginAt": isoformat_utc(user.last_login_at),
    }


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.identity)

    @app.route("/auth/profile", methods=["GET"], endpoint="get_profile")
    @handle_errors
    @login_required
    def get_profile():
        user = container.profile_service.get_profile(current_user())
        return envelope(user=user_json(user))

    @app.route("/auth/profile", methods=["PUT"], endpoint="update_profile")
    @handle_errors
    @login_required
    def update_profile():
        data = json_body()
        user = container.profile_service.update_profile(
            current_user(),
            display_name=data.get("displayName"),
            phone_number=data.get("phoneNumber"),
            dietary_restrictions=data.get("dietaryRestrictions"),
        )
        return envelope(message="Profile updated successfully", user=user_json(user))
