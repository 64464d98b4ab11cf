# Overview: Flask API routes for the kitchen display; returns price-free order projections.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_permission
from ..services import kitchen_service


kitchen_bp = Blueprint("kitchen", __name__, url_prefix="/api/kitchen")


@kitchen_bp.get("/orders")
@require_auth
@require_permission("VIEW_KITCHEN_QUEUE")
def kitchen_queue_route():
    """Orders waiting for or in preparation, oldest first. Polled by the kitchen display."""
    orders = kitchen_service.kitchen_queue(g.principal)
    return jsonify({"orders": orders, "count": len(orders)}), 200


@kitchen_bp.get("/orders/<int:order_id>")
@require_auth
@require_permission("VIEW_KITCHEN_QUEUE")
def kitchen_order_route(order_id: int):
    return jsonify({"order": kitchen_service.kitchen_order(g.principal, order_id)}), 200


@kitchen_bp.post("/orders/<int:order_id>/start")
@require_auth
@require_permission("VIEW_KITCHEN_QUEUE")
def start_preparation_route(order_id: int):
    return jsonify({"order": kitchen_service.start_preparation(g.principal, order_id)}), 200


@kitchen_bp.post("/orders/<int:order_id>/ready")
@require_auth
@require_permission("VIEW_KITCHEN_QUEUE")
def mark_ready_route(order_id: int):
    return jsonify({"order": kitchen_service.mark_ready(g.principal, order_id)}), 200
