from .auth import User
from .orders import DiningTable, Order, OrderItem, OrderCancellation
from .cash import CashSession, Payment
from .audit import AuditEvent

__all__ = [
    'User',
    'DiningTable', 'Order', 'OrderItem', 'OrderCancellation',
    'CashSession', 'Payment',
    'AuditEvent',
]
