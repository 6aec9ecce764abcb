from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import isoformat_utc, parse_date_key, to_date_key
from ..common.web import current_user, envelope, handle_errors, json_body, make_login_required
from ..container import Container
from .model import DailyOrders, Order


def order_json(order: Optional[Order]) -> Optional[dict]:
    if order is None:
        return None
    return {
        "id": order.order_id,
        "userId": order.user_id,
        "date": order.order_date,
        "foodType": order.food_type.value,
        "withPotatoes": order.with_potatoes,
        "withCheese": order.with_cheese,
        "dietaryNotes": order.dietary_notes,
        "specialRequests": order.special_requests,
        "orderTimestamp": isoformat_utc(order.created_at),
        "status": order.status.value,
    }


def daily_orders_json(daily: DailyOrders) -> dict:
    return {
        "date": daily.order_date,
        "orders": [
            {
                **order_json(item.order),
                "user": {"id": item.user.uid, "displayName": item.user.display_name, "email": item.user.email},
            }
            for item in daily.orders
        ],
        "summary": {
            "totalOrders": daily.summary.total_orders,
            "foodBreakdown": dict(daily.summary.food_breakdown),
            "withPotatoes": daily.summary.with_potatoes,
            "withCheese": daily.summary.with_cheese,
        },
    }


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.identity)
    calendar = container.calendar
    orders = container.order_service

    def _listing_date(offset_days: int) -> str:
        requested = request.args.get("date")
        if requested:
            return parse_date_key(requested)
        today = date.fromisoformat(calendar.business_date())
        return to_date_key(today + timedelta(days=offset_days))

    @app.route("/orders", methods=["GET"], endpoint="get_my_order")
    @handle_errors
    @login_required
    def get_my_order():
        now = calendar.now()
        order = orders.get_current_order(current_user(), now=now)
        return envelope(order=order_json(order), targetDate=orders.target_date(now))

    @app.route("/orders", methods=["POST"], endpoint="create_order")
    @handle_errors
    @login_required
    def create_order():
        order = orders.create_order(current_user(), json_body())
        return envelope(201, message="Order created successfully", order=order_json(order))

    @app.route("/orders", methods=["PUT"], endpoint="confirm_order")
    @handle_errors
    @login_required
    def confirm_order():
        order = orders.confirm_order(current_user(), json_body().get("orderId"))
        return envelope(message="Order confirmed", order=order_json(order))

    @app.route("/orders", methods=["PATCH"], endpoint="confirm_all_orders")
    @handle_errors
    @login_required
    def confirm_all_orders():
        result = orders.confirm_all_pending(current_user(), json_body().get("date"))
        message = f"Confirmed {result.confirmed_count} orders"
        if result.failed_ids:
            message += f", {len(result.failed_ids)} failed"
        return envelope(message=message, confirmedCount=result.confirmed_count, failedIds=list(result.failed_ids))

    @app.route("/orders/today", methods=["GET"], endpoint="orders_today")
    @handle_errors
    @login_required
    def orders_today():
        return envelope(**daily_orders_json(orders.list_orders_for_date(_listing_date(0))))

    @app.route("/orders/tomorrow", methods=["GET"], endpoint="orders_tomorrow")
    @handle_errors
    @login_required
    def orders_tomorrow():
        return envelope(**daily_orders_json(orders.list_orders_for_date(_listing_date(1))))

    @app.route("/orders/menu", methods=["GET"], endpoint="orders_menu")
    @handle_errors
    @login_required
    def orders_menu():
        return envelope(foodTypes=orders.food_types(), targetDate=orders.target_date())
