# Overview: Default role-to-permission assignments.

from ..constants import Role


DEFAULT_ROLE_PERMISSIONS = {
    Role.CASHIER: [
        # Every order permission
        "ORDER_CREATE",
        "ORDER_ADD_ITEMS",
        "ORDER_EDIT_ITEMS",
        "ORDER_DELETE_ITEMS",
        "ORDER_CANCEL",
        "ORDER_REQUEST_BILL",
        "ORDER_MARK_PAID",
        "ORDER_VIEW",
        # Every status move
        "STATUS_RECEIVED_TO_IN_PREP",
        "STATUS_IN_PREP_TO_READY",
        "STATUS_READY_TO_DELIVERED",
        "STATUS_TO_CANCELLED",
        # Cash drawer
        "CASH_OPEN_SESSION",
        "CASH_CLOSE_SESSION",
        "CASH_VIEW_REPORTS",
        # Views
        "VIEW_PRICES",
        "VIEW_FINANCIAL_REPORTS",
        "VIEW_PAYMENTS",
        "VIEW_KITCHEN_QUEUE",
        "VIEW_TABLES",
    ],
    Role.WAITER: [
        "ORDER_CREATE",
        "ORDER_ADD_ITEMS",
        "ORDER_REQUEST_BILL",
        "ORDER_VIEW",
        # Only READY -> DELIVERED
        "STATUS_READY_TO_DELIVERED",
        "VIEW_PRICES",
        "VIEW_TABLES",
    ],
    Role.KITCHEN: [
        "ORDER_VIEW",
        "STATUS_RECEIVED_TO_IN_PREP",
        "STATUS_IN_PREP_TO_READY",
        "VIEW_KITCHEN_QUEUE",
        # No VIEW_PRICES, no financial access
    ],
}
