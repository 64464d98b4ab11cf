# Overview: Enumerated string values shared by models, services and routes.


class Role:
    CASHIER = "CASHIER"
    WAITER = "WAITER"
    KITCHEN = "KITCHEN"

    ALL = (CASHIER, WAITER, KITCHEN)


class OrderStatus:
    RECEIVED = "RECEIVED"
    IN_PREP = "IN_PREP"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    ALL = (RECEIVED, IN_PREP, READY, DELIVERED, CANCELLED)
    TERMINAL = frozenset({DELIVERED, CANCELLED})
    KITCHEN_QUEUE = (RECEIVED, IN_PREP)


class Channel:
    TABLE = "TABLE"
    COUNTER = "COUNTER"
    DELIVERY = "DELIVERY"

    ALL = (TABLE, COUNTER, DELIVERY)


class PaymentMethod:
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"
    OTHER = "OTHER"

    ALL = (CASH, CARD, TRANSFER, OTHER)


class AuditAction:
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    STATUS_CHANGE = "STATUS_CHANGE"
    CANCEL = "CANCEL"
    PAYMENT = "PAYMENT"
    OTHER = "OTHER"

    ALL = (CREATE, UPDATE, DELETE, STATUS_CHANGE, CANCEL, PAYMENT, OTHER)
