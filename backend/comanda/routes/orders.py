# Overview: Flask API routes for order operations; parses input and returns JSON responses.

"""
Order API Routes

DESIGN:
- Thin adapters: parse the body, call order_service, serialize
- Domain errors propagate to the app-level error handlers
- Every route needs a resolved principal; permission checks live in the service
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth
from ..services import order_service


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@orders_bp.get("")
@require_auth
def list_orders_route():
    """
    List orders, newest first.

    Query params: status, channel, table_id, user_id
    """
    orders = order_service.list_orders(
        g.principal,
        status=request.args.get("status"),
        channel=request.args.get("channel"),
        table_id=request.args.get("table_id"),
        user_id=request.args.get("user_id"),
    )
    return jsonify({"orders": orders, "count": len(orders)}), 200


@orders_bp.post("")
@require_auth
def create_order_route():
    """
    Create an order.

    Request body:
    {
        "channel": "TABLE",
        "table_id": 3,  (TABLE channel only)
        "items": [{"product_name": "Burger", "quantity": 2, "unit_price": "10.00"}],
        "notes": "..."  (optional)
    }
    """
    data = _json_body()
    order = order_service.create_order(
        g.principal,
        channel=data.get("channel"),
        items=data.get("items"),
        table_id=data.get("table_id"),
        notes=data.get("notes"),
    )
    return jsonify({"order": order}), 201


@orders_bp.get("/<int:order_id>")
@require_auth
def get_order_route(order_id: int):
    return jsonify({"order": order_service.get_order_by_id(g.principal, order_id)}), 200


@orders_bp.post("/<int:order_id>/items")
@require_auth
def add_items_route(order_id: int):
    data = _json_body()
    order = order_service.add_items(g.principal, order_id, data.get("items"))
    return jsonify({"order": order}), 200


@orders_bp.patch("/<int:order_id>/items/<int:item_id>")
@require_auth
def edit_item_route(order_id: int, item_id: int):
    order = order_service.edit_item(g.principal, order_id, item_id, _json_body())
    return jsonify({"order": order}), 200


@orders_bp.delete("/<int:order_id>/items/<int:item_id>")
@require_auth
def delete_item_route(order_id: int, item_id: int):
    order = order_service.delete_item(g.principal, order_id, item_id)
    return jsonify({"order": order}), 200


@orders_bp.post("/<int:order_id>/status")
@require_auth
def change_status_route(order_id: int):
    """
    Request body:
    {
        "status": "IN_PREP",
        "reason": "..."  (required when status is CANCELLED)
    }

    Returns:
        200: Updated order
        400: Illegal transition or paid order
        403: Role may not take this transition
        409: Order changed concurrently, refresh and retry
    """
    data = _json_body()
    order = order_service.change_status(
        g.principal,
        order_id,
        data.get("status"),
        reason=data.get("reason"),
    )
    return jsonify({"order": order}), 200


@orders_bp.post("/<int:order_id>/cancel")
@require_auth
def cancel_order_route(order_id: int):
    data = _json_body()
    order = order_service.cancel_order(g.principal, order_id, data.get("reason"))
    return jsonify({"order": order}), 200


@orders_bp.post("/<int:order_id>/request-bill")
@require_auth
def request_bill_route(order_id: int):
    order = order_service.request_bill(g.principal, order_id)
    return jsonify({"order": order}), 200


@orders_bp.get("/<int:order_id>/total")
@require_auth
def order_total_route(order_id: int):
    return jsonify(order_service.calculate_total(g.principal, order_id)), 200
