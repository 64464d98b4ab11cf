# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Order Lifecycle Service

WHY: Waiter tablets, the kitchen display and the cashier terminal all poll
and mutate the same orders. Every mutation goes through here so permission,
modifiability and transition rules are checked in one place.

DESIGN PRINCIPLES:
- Authorization only through the access policy (never by comparing roles)
- Status writes are compare-and-swap on the status that was read; losing
  the race raises ConcurrencyError instead of overwriting
- Multi-write sequences (cancel = status + cancellation record) run in one
  transaction
- Audit events are emitted after commit and can never fail the operation
- Every order handed back to a caller goes through present_order(), so a
  principal without VIEW_PRICES never sees a price
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from ..constants import AuditAction, Channel, OrderStatus
from ..errors import ConcurrencyError, ConflictError, ForbiddenError, NotFoundError, StateError, ValidationError
from ..extensions import db
from ..models import DiningTable, Order, OrderCancellation, OrderItem
from ..policy import current_policy
from ..validation import (
    optional_text,
    parse_choice,
    parse_items,
    parse_money,
    parse_quantity,
    require_text,
)
from . import audit_service
from .concurrency import lock_for_update, transaction, update_if
from .lifecycle_service import validate_status


EDITABLE_ITEM_FIELDS = ("product_name", "quantity", "unit_price", "notes")


# =============================================================================
# INTERNAL HELPERS
# =============================================================================

def load_order(order_id, *, for_update: bool = False) -> Order:
    query = db.session.query(Order).filter_by(id=order_id).populate_existing()
    if for_update:
        query = lock_for_update(query)
    order = query.first()
    if not order:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def _require_modifiable(order: Order) -> None:
    if order.is_modifiable:
        return
    if order.is_paid:
        raise StateError("Cannot modify paid order")
    raise StateError("Cannot modify cancelled order")


def _open_order_for_table(table_id: int) -> Order | None:
    return db.session.query(Order).filter(
        Order.table_id == table_id,
        Order.status.notin_(tuple(OrderStatus.TERMINAL)),
        Order.paid_at.is_(None),
    ).first()


def _build_item(item) -> OrderItem:
    return OrderItem(
        product_name=item.product_name,
        quantity=item.quantity,
        unit_price=item.unit_price,
        notes=item.notes,
    )


def present_order(order: Order, principal) -> dict:
    """Serialize an order for a principal; prices are nulled without VIEW_PRICES."""
    include_prices = current_policy().has_permission(principal.role, "VIEW_PRICES")
    return order.to_dict(include_prices=include_prices)


def order_total(order: Order) -> Decimal:
    """Sum of quantity x unit price across the order's items."""
    return order.total


# =============================================================================
# ORDER CREATION & ITEMS
# =============================================================================

def create_order(principal, channel, items, table_id=None, notes=None) -> dict:
    """
    Create an order in RECEIVED with its first items.

    Raises:
        ForbiddenError: Role lacks ORDER_CREATE
        ValidationError: Bad channel, missing/extra table, empty or invalid items
        NotFoundError: Table does not exist or is inactive
        ConflictError: Table already has an open order
    """
    current_policy().require(principal, "ORDER_CREATE", "No permission to create orders")

    channel = parse_choice(channel, "channel", Channel.ALL)
    if channel == Channel.TABLE and table_id is None:
        raise ValidationError("Table ID is required for TABLE channel")
    if channel != Channel.TABLE and table_id is not None:
        raise ValidationError(f"Table ID is only allowed for {Channel.TABLE} channel")
    if table_id is not None:
        table_id = parse_quantity(table_id, "table_id")

    parsed_items = parse_items(items)
    notes = optional_text(notes, "notes")

    try:
        with transaction():
            if channel == Channel.TABLE:
                table = lock_for_update(db.session.query(DiningTable).filter_by(id=table_id)).first()
                if not table or not table.is_active:
                    raise NotFoundError(f"Table {table_id} not found")
                if _open_order_for_table(table_id):
                    raise ConflictError("Table already has an active order")

            order = Order(
                channel=channel,
                table_id=table_id,
                status=OrderStatus.RECEIVED,
                requested_bill=False,
                notes=notes,
                user_id=principal.user_id,
            )
            order.items = [_build_item(item) for item in parsed_items]
            db.session.add(order)
            db.session.flush()
    except IntegrityError:
        # Lost the race to another create on the same table
        raise ConflictError("Table already has an active order")

    audit_service.log_order_created(principal, order.id, channel)
    return present_order(order, principal)


def add_items(principal, order_id, items) -> dict:
    """
    Append items to an open order. Pure append: existing lines are untouched.

    Raises:
        ForbiddenError: Role lacks ORDER_ADD_ITEMS
        NotFoundError: Order missing
        StateError: Order paid or cancelled
    """
    current_policy().require(principal, "ORDER_ADD_ITEMS", "No permission to add items")
    parsed_items = parse_items(items)

    with transaction():
        order = load_order(order_id, for_update=True)
        _require_modifiable(order)
        for item in parsed_items:
            order.items.append(_build_item(item))
        db.session.flush()

    audit_service.emit(
        principal,
        AuditAction.UPDATE,
        order_id=order.id,
        details=f"Added {len(parsed_items)} item(s) to order",
    )
    return present_order(order, principal)


def _parse_item_patch(patch) -> dict:
    if not isinstance(patch, dict):
        raise ValidationError("Item changes must be an object")
    if "price" in patch and "unit_price" not in patch:
        patch = {**patch, "unit_price": patch["price"]}

    changes = {}
    if "product_name" in patch:
        changes["product_name"] = require_text(patch["product_name"], "product_name", max_length=128)
    if "quantity" in patch:
        changes["quantity"] = parse_quantity(patch["quantity"])
    if "unit_price" in patch:
        changes["unit_price"] = parse_money(patch["unit_price"], "unit_price")
    if "notes" in patch:
        changes["notes"] = optional_text(patch["notes"], "notes", max_length=255)

    if not changes:
        raise ValidationError(f"Nothing to update. Editable fields: {list(EDITABLE_ITEM_FIELDS)}")
    return changes


def _find_item(order: Order, item_id) -> OrderItem:
    for item in order.items:
        if str(item.id) == str(item_id):
            return item
    raise NotFoundError("Item not found in this order")


def edit_item(principal, order_id, item_id, patch) -> dict:
    """
    Change one line of an unpaid order.

    Raises:
        ForbiddenError: Role lacks ORDER_EDIT_ITEMS
        NotFoundError: Order or item missing
        StateError: Order paid or cancelled
    """
    current_policy().require(principal, "ORDER_EDIT_ITEMS", "No permission to edit items")
    changes = _parse_item_patch(patch)

    with transaction():
        order = load_order(order_id, for_update=True)
        _require_modifiable(order)
        item = _find_item(order, item_id)
        product_name = item.product_name
        for field, value in changes.items():
            setattr(item, field, value)
        db.session.flush()

    audit_service.emit(principal, AuditAction.UPDATE, order_id=order.id, details=f"Edited item: {product_name}")
    return present_order(order, principal)


def delete_item(principal, order_id, item_id) -> dict:
    """
    Remove one line from an unpaid order.

    The last remaining item can never be deleted, whoever asks: the order
    has to be cancelled instead.

    Raises:
        NotFoundError: Order or item missing
        StateError: Last item, or order paid/cancelled
        ForbiddenError: Role lacks ORDER_DELETE_ITEMS
    """
    policy = current_policy()

    with transaction():
        order = load_order(order_id, for_update=True)
        item = _find_item(order, item_id)
        if len(order.items) == 1:
            raise StateError("Cannot delete the last item. Cancel the order instead.")
        policy.require(principal, "ORDER_DELETE_ITEMS", "No permission to delete items")
        _require_modifiable(order)

        product_name = item.product_name
        order.items.remove(item)
        db.session.flush()

    audit_service.emit(principal, AuditAction.DELETE, order_id=order.id, details=f"Deleted item: {product_name}")
    return present_order(order, principal)


# =============================================================================
# STATUS CHANGES
# =============================================================================

def change_status(principal, order_id, new_status, reason=None) -> dict:
    """
    Move an order along the lifecycle.

    Checks, in order: paid orders may only take the DELIVERED edge; the edge
    must be in the transition table; the caller's role must hold that edge's
    permission. The write is conditional on the status (and unpaid flag) that
    was read. CANCELLED is handed to cancel_order(), which needs a reason.

    Raises:
        ValidationError: Unknown status or illegal edge
        StateError: Order is paid and new_status is not DELIVERED
        ForbiddenError: Role may not take this edge
        ConcurrencyError: Order changed between read and write
    """
    policy = current_policy()
    if new_status is None:
        raise ValidationError("new_status is required")
    new_status = str(new_status).strip().upper()
    validate_status(new_status)

    order = load_order(order_id)
    from_status = order.status
    was_paid = order.paid_at is not None

    if was_paid and new_status != OrderStatus.DELIVERED:
        raise StateError("Cannot change status of paid order")

    if not policy.is_valid_transition(from_status, new_status):
        raise ValidationError(f"Invalid status transition from {from_status} to {new_status}")

    if not policy.can_role_change_status(principal.role, from_status, new_status):
        raise ForbiddenError(
            f"Role {principal.role} cannot change status from {from_status} to {new_status}",
            permission=policy.transition_permission(from_status, new_status),
        )

    if new_status == OrderStatus.CANCELLED:
        return cancel_order(principal, order_id, reason)

    expected = {"status": from_status}
    if not was_paid:
        expected["paid_at"] = None

    with transaction():
        matched = update_if(Order, order.id, expected, {"status": new_status})
        if matched == 0:
            raise ConcurrencyError("Order status changed. Please refresh and try again.")

    audit_service.log_status_change(principal, order.id, from_status, new_status)
    return present_order(load_order(order.id), principal)


def cancel_order(principal, order_id, reason) -> dict:
    """
    Cancel an unpaid, non-terminal order.

    Status and cancellation record commit together or not at all.

    Raises:
        ForbiddenError: Role lacks ORDER_CANCEL
        ValidationError: Empty reason
        StateError: Order paid, already cancelled, or delivered
        ConcurrencyError: Order changed between read and write
    """
    policy = current_policy()
    policy.require(principal, "ORDER_CANCEL", "No permission to cancel orders")

    if reason is None or not str(reason).strip():
        raise ValidationError("Cancellation reason is required")
    reason = require_text(reason, "reason")

    order = load_order(order_id)
    from_status = order.status

    if order.paid_at is not None:
        raise StateError("Cannot cancel paid order")
    if from_status == OrderStatus.CANCELLED:
        raise StateError("Order is already cancelled")
    if not policy.is_valid_transition(from_status, OrderStatus.CANCELLED):
        raise StateError(f"Cannot cancel order in status {from_status}")
    if not policy.can_role_change_status(principal.role, from_status, OrderStatus.CANCELLED):
        raise ForbiddenError(
            f"Role {principal.role} cannot cancel orders",
            permission=policy.transition_permission(from_status, OrderStatus.CANCELLED),
        )

    with transaction():
        matched = update_if(
            Order,
            order.id,
            {"status": from_status, "paid_at": None},
            {"status": OrderStatus.CANCELLED},
        )
        if matched == 0:
            raise ConcurrencyError("Order status changed. Please refresh and try again.")
        db.session.add(OrderCancellation(order_id=order.id, reason=reason, user_id=principal.user_id))
        db.session.flush()

    audit_service.log_cancel(principal, order.id, reason)
    return present_order(load_order(order.id), principal)


def request_bill(principal, order_id) -> dict:
    """
    Flag the order as waiting for the bill. Idempotent.

    Raises:
        ForbiddenError: Role lacks ORDER_REQUEST_BILL
        StateError: Order already paid or cancelled
    """
    current_policy().require(principal, "ORDER_REQUEST_BILL", "No permission to request bill")

    order = load_order(order_id)
    if order.paid_at is not None:
        raise StateError("Order is already paid")
    if order.status == OrderStatus.CANCELLED:
        raise StateError("Cannot request bill for cancelled order")

    if not order.requested_bill:
        with transaction():
            matched = update_if(Order, order.id, {"paid_at": None}, {"requested_bill": True})
            if matched == 0:
                raise ConcurrencyError("Order changed. Please refresh and try again.")
        audit_service.emit(principal, AuditAction.UPDATE, order_id=order.id, details="Bill requested")

    return present_order(load_order(order.id), principal)


# =============================================================================
# READS
# =============================================================================

def get_order_by_id(principal, order_id) -> dict:
    current_policy().require(principal, "ORDER_VIEW", "No permission to view orders")
    return present_order(load_order(order_id), principal)


def list_orders(principal, *, status=None, channel=None, table_id=None, user_id=None) -> list[dict]:
    """Orders newest first, optionally filtered."""
    current_policy().require(principal, "ORDER_VIEW", "No permission to view orders")

    query = db.session.query(Order)
    if status:
        status = str(status).strip().upper()
        validate_status(status)
        query = query.filter(Order.status == status)
    if channel:
        query = query.filter(Order.channel == parse_choice(channel, "channel", Channel.ALL))
    if table_id is not None:
        query = query.filter(Order.table_id == parse_quantity(table_id, "table_id"))
    if user_id is not None:
        query = query.filter(Order.user_id == parse_quantity(user_id, "user_id"))

    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
    return [present_order(order, principal) for order in orders]


def calculate_total(principal, order_id) -> dict:
    """
    Raises:
        ForbiddenError: Role lacks VIEW_PRICES (kitchen)
    """
    current_policy().require(principal, "VIEW_PRICES", "No permission to view order totals")
    order = load_order(order_id)
    total = order_total(order)
    return {
        "order_id": order.id,
        "subtotal": total,
        "total": total,
        "items_count": len(order.items),
    }
