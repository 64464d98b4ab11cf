from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class CashSession(db.Model):
    """
    Cashier drawer session.

    LIFECYCLE:
    - active: closed_at is NULL, payments may reference it
    - closed: closed_at set, final_cash recorded; never reopened

    At most one active session per user, enforced by a partial unique index.
    """
    __tablename__ = "cash_sessions"
    __table_args__ = (
        db.Index(
            "uq_cash_sessions_user_active",
            "user_id",
            unique=True,
            sqlite_where=db.text("closed_at IS NULL"),
            postgresql_where=db.text("closed_at IS NULL"),
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    opened_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    initial_cash = db.Column(db.Numeric(10, 2), nullable=False)
    final_cash = db.Column(db.Numeric(10, 2), nullable=True)

    notes = db.Column(db.Text, nullable=True)

    user = db.relationship("User", backref=db.backref("cash_sessions", lazy=True))

    @property
    def is_active(self) -> bool:
        return self.closed_at is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "opened_at": to_utc_z(self.opened_at),
            "closed_at": to_utc_z(self.closed_at),
            "is_active": self.is_active,
            "initial_cash": str(self.initial_cash),
            "final_cash": str(self.final_cash) if self.final_cash is not None else None,
            "notes": self.notes,
        }


class Payment(db.Model):
    """
    One payment applied to an order.

    WHY: Split payments are common at tables; the order is paid once the
    sum of its payments reaches the item total.

    IMMUTABLE: never updated or deleted after insert.
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        db.Index("ix_payments_order_created", "order_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    cash_session_id = db.Column(db.Integer, db.ForeignKey("cash_sessions.id"), nullable=False, index=True)

    amount = db.Column(db.Numeric(10, 2), nullable=False)
    method = db.Column(db.String(16), nullable=False)  # CASH, CARD, TRANSFER, OTHER
    reference = db.Column(db.String(128), nullable=True)  # Card auth code, transfer id, etc.
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    order = db.relationship("Order", backref=db.backref("payments", lazy=True, order_by="Payment.id"))
    cash_session = db.relationship("CashSession", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "user_id": self.user_id,
            "cash_session_id": self.cash_session_id,
            "amount": str(self.amount),
            "method": self.method,
            "reference": self.reference,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
