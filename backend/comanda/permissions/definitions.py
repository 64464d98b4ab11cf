# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from ..constants import OrderStatus
from .categories import PermissionCategory


# -- ORDERS --

ORDER_PERMISSIONS = [
    (
        "ORDER_CREATE",
        "Create Order",
        "Open a new order with its first items",
        PermissionCategory.ORDERS,
    ),
    (
        "ORDER_ADD_ITEMS",
        "Add Items",
        "Append items to an open order",
        PermissionCategory.ORDERS,
    ),
    (
        "ORDER_EDIT_ITEMS",
        "Edit Items",
        "Change name, quantity, price or notes of an order item",
        PermissionCategory.ORDERS,
    ),
    (
        "ORDER_DELETE_ITEMS",
        "Delete Items",
        "Remove an item from an order (never the last one)",
        PermissionCategory.ORDERS,
    ),
    (
        "ORDER_CANCEL",
        "Cancel Order",
        "Cancel an unpaid order with a reason",
        PermissionCategory.ORDERS,
    ),
    (
        "ORDER_REQUEST_BILL",
        "Request Bill",
        "Flag an order as waiting for the bill",
        PermissionCategory.ORDERS,
    ),
    (
        "ORDER_MARK_PAID",
        "Take Payments",
        "Record payments against an order",
        PermissionCategory.ORDERS,
    ),
    (
        "ORDER_VIEW",
        "View Orders",
        "Read orders and their items",
        PermissionCategory.ORDERS,
    ),
]


# -- STATUS TRANSITIONS --

STATUS_PERMISSIONS = [
    (
        "STATUS_RECEIVED_TO_IN_PREP",
        "Start Preparation",
        "Move an order from RECEIVED to IN_PREP",
        PermissionCategory.STATUS,
    ),
    (
        "STATUS_IN_PREP_TO_READY",
        "Mark Ready",
        "Move an order from IN_PREP to READY",
        PermissionCategory.STATUS,
    ),
    (
        "STATUS_READY_TO_DELIVERED",
        "Deliver",
        "Move an order from READY to DELIVERED",
        PermissionCategory.STATUS,
    ),
    (
        "STATUS_TO_CANCELLED",
        "Move To Cancelled",
        "Move any open order to CANCELLED",
        PermissionCategory.STATUS,
    ),
]


# -- CASH --

CASH_PERMISSIONS = [
    (
        "CASH_OPEN_SESSION",
        "Open Cash Session",
        "Open a cash drawer session",
        PermissionCategory.CASH,
    ),
    (
        "CASH_CLOSE_SESSION",
        "Close Cash Session",
        "Close one's own cash drawer session",
        PermissionCategory.CASH,
    ),
    (
        "CASH_VIEW_REPORTS",
        "View Cash Sessions",
        "List cash sessions and their payment sums",
        PermissionCategory.CASH,
    ),
]


# -- VIEWS --

VIEW_PERMISSIONS = [
    (
        "VIEW_PRICES",
        "View Prices",
        "See item prices and order totals",
        PermissionCategory.VIEWS,
    ),
    (
        "VIEW_FINANCIAL_REPORTS",
        "View Financial Reports",
        "See cash session payment sums and drawer variance",
        PermissionCategory.VIEWS,
    ),
    (
        "VIEW_PAYMENTS",
        "View Payment Records",
        "See individual payment records of an order",
        PermissionCategory.VIEWS,
    ),
    (
        "VIEW_KITCHEN_QUEUE",
        "View Kitchen Queue",
        "See the price-free kitchen queue",
        PermissionCategory.VIEWS,
    ),
    (
        "VIEW_TABLES",
        "View Tables",
        "See the table occupancy board and waiter order list",
        PermissionCategory.VIEWS,
    ),
]


PERMISSION_DEFINITIONS = (
    ORDER_PERMISSIONS
    + STATUS_PERMISSIONS
    + CASH_PERMISSIONS
    + VIEW_PERMISSIONS
)


# Which permission authorizes each structurally valid (from, to) status move.
STATUS_TRANSITION_PERMISSIONS = {
    (OrderStatus.RECEIVED, OrderStatus.IN_PREP): "STATUS_RECEIVED_TO_IN_PREP",
    (OrderStatus.IN_PREP, OrderStatus.READY): "STATUS_IN_PREP_TO_READY",
    (OrderStatus.READY, OrderStatus.DELIVERED): "STATUS_READY_TO_DELIVERED",
    (OrderStatus.RECEIVED, OrderStatus.CANCELLED): "STATUS_TO_CANCELLED",
    (OrderStatus.IN_PREP, OrderStatus.CANCELLED): "STATUS_TO_CANCELLED",
    (OrderStatus.READY, OrderStatus.CANCELLED): "STATUS_TO_CANCELLED",
}
