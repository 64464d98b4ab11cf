# Overview: Read-side slice of orders for waiter tablets.

from __future__ import annotations

from ..constants import Channel, OrderStatus
from ..extensions import db
from ..models import DiningTable, Order
from ..policy import current_policy
from ..validation import parse_choice
from . import order_service
from .lifecycle_service import validate_status


def _require_waiter_view(principal) -> None:
    current_policy().require(principal, "VIEW_TABLES", "No permission to view tables")


def table_board(principal) -> list[dict]:
    """
    Every active table with its open order, if any.

    A table is occupied while it has an order that is neither terminal nor
    paid.
    """
    _require_waiter_view(principal)

    tables = db.session.query(DiningTable).filter_by(is_active=True).order_by(DiningTable.number.asc()).all()
    open_orders = db.session.query(Order).filter(
        Order.table_id.isnot(None),
        Order.status.notin_(tuple(OrderStatus.TERMINAL)),
        Order.paid_at.is_(None),
    ).all()
    by_table = {order.table_id: order for order in open_orders}

    board = []
    for table in tables:
        order = by_table.get(table.id)
        board.append({
            "table": table.to_dict(),
            "is_occupied": order is not None,
            "active_order_id": order.id if order else None,
            "active_order_status": order.status if order else None,
            "requested_bill": bool(order and order.requested_bill),
            "order": order_service.present_order(order, principal) if order else None,
        })
    return board


def waiter_orders(principal, *, status=None, channel=None, ready_only: bool = False) -> list[dict]:
    """Orders newest first; ready_only narrows to READY orders waiting for delivery."""
    _require_waiter_view(principal)

    query = db.session.query(Order)
    if ready_only:
        query = query.filter(Order.status == OrderStatus.READY)
    elif status:
        status = str(status).strip().upper()
        validate_status(status)
        query = query.filter(Order.status == status)
    if channel:
        query = query.filter(Order.channel == parse_choice(channel, "channel", Channel.ALL))

    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
    return [order_service.present_order(order, principal) for order in orders]


def waiter_order(principal, order_id) -> dict:
    _require_waiter_view(principal)
    return order_service.present_order(order_service.load_order(order_id), principal)


def deliver(principal, order_id) -> dict:
    """READY -> DELIVERED."""
    _require_waiter_view(principal)
    return order_service.change_status(principal, order_id, OrderStatus.DELIVERED)
