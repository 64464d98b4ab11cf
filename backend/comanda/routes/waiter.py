# Overview: Flask API routes for waiter tablets; table board and order tracking.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..services import waiter_service


waiter_bp = Blueprint("waiter", __name__, url_prefix="/api/waiter")


@waiter_bp.get("/tables")
@require_auth
@require_permission("VIEW_TABLES")
def table_board_route():
    return jsonify({"tables": waiter_service.table_board(g.principal)}), 200


@waiter_bp.get("/orders")
@require_auth
@require_permission("VIEW_TABLES")
def waiter_orders_route():
    """
    Query params: status, channel, ready (true/false)
    """
    ready_only = request.args.get("ready", "").lower() in ("1", "true", "yes")
    orders = waiter_service.waiter_orders(
        g.principal,
        status=request.args.get("status"),
        channel=request.args.get("channel"),
        ready_only=ready_only,
    )
    return jsonify({"orders": orders, "count": len(orders)}), 200


@waiter_bp.get("/orders/<int:order_id>")
@require_auth
@require_permission("VIEW_TABLES")
def waiter_order_route(order_id: int):
    return jsonify({"order": waiter_service.waiter_order(g.principal, order_id)}), 200


@waiter_bp.post("/orders/<int:order_id>/deliver")
@require_auth
@require_permission("VIEW_TABLES")
def deliver_route(order_id: int):
    return jsonify({"order": waiter_service.deliver(g.principal, order_id)}), 200
