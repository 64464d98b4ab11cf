# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    ORDERS = "ORDERS"
    STATUS = "STATUS"
    CASH = "CASH"
    VIEWS = "VIEWS"

    ALL = (ORDERS, STATUS, CASH, VIEWS)
