# Overview: Read-side slice of orders for the kitchen display.

"""
Kitchen View

The kitchen sees what to cook and nothing about money. The projection here
is built from scratch (not by nulling fields of the full order), so no price
key ever reaches a kitchen screen.
"""

from __future__ import annotations

from ..constants import OrderStatus
from ..extensions import db
from ..models import Order
from ..policy import current_policy
from ..time_utils import to_utc_z
from . import order_service


def kitchen_projection(order: Order) -> dict:
    return {
        "id": order.id,
        "channel": order.channel,
        "table": order.table.display_label if order.table else None,
        "table_id": order.table_id,
        "status": order.status,
        "notes": order.notes,
        "created_at": to_utc_z(order.created_at),
        "updated_at": to_utc_z(order.updated_at),
        "items": [
            {
                "id": item.id,
                "product_name": item.product_name,
                "quantity": item.quantity,
                "notes": item.notes,
            }
            for item in order.items
        ],
    }


def _require_kitchen_view(principal) -> None:
    current_policy().require(principal, "VIEW_KITCHEN_QUEUE", "No permission to view kitchen queue")


def kitchen_queue(principal) -> list[dict]:
    """Unpaid orders waiting for or in preparation, oldest first."""
    _require_kitchen_view(principal)
    orders = db.session.query(Order).filter(
        Order.status.in_(OrderStatus.KITCHEN_QUEUE),
        Order.paid_at.is_(None),
    ).order_by(Order.created_at.asc(), Order.id.asc()).all()
    return [kitchen_projection(order) for order in orders]


def kitchen_order(principal, order_id) -> dict:
    _require_kitchen_view(principal)
    return kitchen_projection(order_service.load_order(order_id))


def start_preparation(principal, order_id) -> dict:
    """RECEIVED -> IN_PREP."""
    _require_kitchen_view(principal)
    order_service.change_status(principal, order_id, OrderStatus.IN_PREP)
    return kitchen_projection(order_service.load_order(order_id))


def mark_ready(principal, order_id) -> dict:
    """IN_PREP -> READY."""
    _require_kitchen_view(principal)
    order_service.change_status(principal, order_id, OrderStatus.READY)
    return kitchen_projection(order_service.load_order(order_id))
