from __future__ import annotations

from decimal import Decimal

from ..constants import OrderStatus
from ..extensions import db
from ..time_utils import to_utc_z, utcnow


_OPEN_ORDER_CLAUSE = "status NOT IN ('DELIVERED', 'CANCELLED') AND paid_at IS NULL"


class DiningTable(db.Model):
    """Physical table in the dining room; TABLE-channel orders point here."""
    __tablename__ = "dining_tables"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    number = db.Column(db.Integer, nullable=False, unique=True)
    label = db.Column(db.String(64), nullable=True)
    zone = db.Column(db.String(64), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    @property
    def display_label(self) -> str:
        return self.label or f"Table {self.number}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "label": self.display_label,
            "zone": self.zone,
            "is_active": self.is_active,
        }


class Order(db.Model):
    """
    Customer order.

    LIFECYCLE: see services/lifecycle_service.py. paid_at is orthogonal to
    status: set exactly once by the payment service, never cleared, and once
    set the order is frozen except for its final DELIVERED move.

    status is only ever written through a conditional update keyed on the
    previously read value (services/concurrency.update_if).
    """
    __tablename__ = "orders"
    __table_args__ = (
        # One open order per table
        db.Index(
            "uq_orders_table_open",
            "table_id",
            unique=True,
            sqlite_where=db.text(_OPEN_ORDER_CLAUSE),
            postgresql_where=db.text(_OPEN_ORDER_CLAUSE),
        ),
        db.Index("ix_orders_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    channel = db.Column(db.String(16), nullable=False, index=True)  # TABLE, COUNTER, DELIVERY
    table_id = db.Column(db.Integer, db.ForeignKey("dining_tables.id"), nullable=True, index=True)

    status = db.Column(db.String(16), nullable=False, default=OrderStatus.RECEIVED, index=True)
    requested_bill = db.Column(db.Boolean, nullable=False, default=False)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)

    notes = db.Column(db.Text, nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    table = db.relationship("DiningTable", backref=db.backref("orders", lazy=True))
    user = db.relationship("User")
    items = db.relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
    )
    cancellation = db.relationship(
        "OrderCancellation", back_populates="order", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def is_paid(self) -> bool:
        return self.paid_at is not None

    @property
    def is_modifiable(self) -> bool:
        """Items may change only while unpaid and not cancelled."""
        return self.paid_at is None and self.status != OrderStatus.CANCELLED

    @property
    def total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0.00"))

    def to_dict(self, *, include_prices: bool = True) -> dict:
        return {
            "id": self.id,
            "channel": self.channel,
            "table": self.table.to_dict() if self.table else None,
            "table_id": self.table_id,
            "status": self.status,
            "requested_bill": self.requested_bill,
            "paid_at": to_utc_z(self.paid_at),
            "is_paid": self.is_paid,
            "notes": self.notes,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "items": [item.to_dict(include_price=include_prices) for item in self.items],
            "total": str(self.total) if include_prices else None,
            "cancellation": self.cancellation.to_dict() if self.cancellation else None,
        }


class OrderItem(db.Model):
    """One line of an order. Immutable once the order is paid."""
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
        db.CheckConstraint("unit_price >= 0", name="ck_order_items_price_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_name = db.Column(db.String(128), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)
    notes = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    order = db.relationship("Order", back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.unit_price) * self.quantity

    def to_dict(self, *, include_price: bool = True) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price) if include_price else None,
            "line_total": str(self.line_total) if include_price else None,
            "notes": self.notes,
        }


class OrderCancellation(db.Model):
    """Why and by whom an order was cancelled. Written with the CANCELLED status."""
    __tablename__ = "order_cancellations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, unique=True)
    reason = db.Column(db.String(255), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    order = db.relationship("Order", back_populates="cancellation")

    def to_dict(self) -> dict:
        return {
            "reason": self.reason,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
        }
