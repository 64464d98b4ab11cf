# Overview: Flask API routes for payments operations; parses input and returns JSON responses.

"""
Payment API Routes

SECURITY:
- ORDER_MARK_PAID required for recording payments (cashier)
- VIEW_PAYMENTS required for the payment list (cashier)
- VIEW_PRICES required for the balance summary (cashier, waiter)
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..services import payment_service


payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.post("")
@require_auth
@require_permission("ORDER_MARK_PAID")
def create_payment_route():
    """
    Record a payment against an order.

    Request body:
    {
        "order_id": 12,
        "method": "CASH",
        "amount": "25.00",
        "reference": "AUTH-12345",  (optional)
        "notes": "..."  (optional)
    }

    Returns:
        201: Payment, order snapshot and balance
        400: Invalid amount, overpayment, cancelled/paid order, no cash session
        403: Permission denied
        404: Order not found
    """
    data = request.get_json(silent=True) or {}
    result = payment_service.create_payment(
        g.principal,
        data.get("order_id"),
        method=data.get("method"),
        amount=data.get("amount"),
        reference=data.get("reference"),
        notes=data.get("notes"),
    )
    return jsonify(result), 201


@payments_bp.get("/orders/<int:order_id>")
@require_auth
@require_permission("VIEW_PAYMENTS")
def get_order_payments_route(order_id: int):
    return jsonify(payment_service.get_order_payments(g.principal, order_id)), 200


@payments_bp.get("/orders/<int:order_id>/summary")
@require_auth
def get_payment_summary_route(order_id: int):
    return jsonify(payment_service.get_payment_summary(g.principal, order_id)), 200
