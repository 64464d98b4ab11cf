# Overview: Service-layer operations for payments; encapsulates business logic and database work.

"""
Payment Processing Service

WHY: Tables split the bill. An order accumulates payments until their sum
reaches the item total, at which point it is marked paid exactly once.

DESIGN PRINCIPLES:
- Split payments: one order, many payments
- No overpayment: the running sum never exceeds the total
- Payments are immutable: never updated, never deleted
- "Claim order, read payments, insert, recompute, set paid_at" runs in one
  transaction; the claim is a conditional write on paid_at IS NULL
- A drawer must be open somewhere before any payment is accepted
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func

from ..constants import AuditAction, OrderStatus, PaymentMethod
from ..errors import ConcurrencyError, OverpaymentError, StateError
from ..extensions import db
from ..models import Order, Payment
from ..policy import current_policy
from ..time_utils import utcnow
from ..validation import CENT, optional_text, parse_choice, parse_money
from . import audit_service, cash_service
from .concurrency import transaction, update_if
from .order_service import load_order, present_order


# Absorbs rounding only; amounts are already cent-quantized
PAYMENT_TOLERANCE = Decimal("0.01")


# =============================================================================
# TOTALS
# =============================================================================

def calculate_order_total(order: Order) -> Decimal:
    """Sum of quantity x unit price across the order's items."""
    return Decimal(order.total).quantize(CENT)


def calculate_paid_total(order_id: int) -> Decimal:
    """Sum of all payment amounts recorded for the order."""
    paid = db.session.query(
        func.coalesce(func.sum(Payment.amount), 0)
    ).filter(Payment.order_id == order_id).scalar()
    return Decimal(str(paid)).quantize(CENT)


def _summary(order: Order) -> dict:
    total = calculate_order_total(order)
    paid = calculate_paid_total(order.id)
    return {
        "order_id": order.id,
        "total": total,
        "paid": paid,
        "remaining": total - paid,
        "is_paid": order.paid_at is not None,
    }


# =============================================================================
# PAYMENT CREATION
# =============================================================================

def create_payment(
    principal,
    order_id,
    method,
    amount,
    reference: str | None = None,
    notes: str | None = None,
) -> dict:
    """
    Record a payment and mark the order paid when it is settled.

    Args:
        order_id: Order being paid
        method: CASH, CARD, TRANSFER or OTHER
        amount: Positive amount, quantized to cents
        reference: Card authorization, transfer id, etc.

    Returns:
        Dict with payment, order snapshot, total, paid, remaining, is_paid

    Raises:
        ForbiddenError: Role lacks ORDER_MARK_PAID
        ValidationError: amount <= 0, unknown method
        StateError: No active cash session, order cancelled or already paid
        OverpaymentError: paid + amount would exceed the order total
        NotFoundError: Order does not exist
    """
    current_policy().require(principal, "ORDER_MARK_PAID", "No permission to register payments")

    if not cash_service.get_any_active_session():
        raise StateError("No active cash session. Open a cash session before accepting payments.")

    method = parse_choice(method, "method", PaymentMethod.ALL)
    reference = optional_text(reference, "reference", max_length=128)
    notes = optional_text(notes, "notes")

    with transaction():
        # Claim the unpaid order row with a write before reading any balance.
        # The write holds the row lock on every backend (the database write
        # lock on SQLite), so concurrent payments for one order serialize here.
        claimed = update_if(Order, order_id, {"paid_at": None}, {"updated_at": utcnow()})
        order = load_order(order_id, for_update=True)
        if claimed == 0:
            raise StateError("Order is already paid")

        if order.status == OrderStatus.CANCELLED:
            raise StateError("Cannot pay cancelled order")

        amount = parse_money(amount, "amount", allow_zero=False)

        total = calculate_order_total(order)
        paid = calculate_paid_total(order.id)
        updated_paid = paid + amount
        if updated_paid - total >= PAYMENT_TOLERANCE:
            raise OverpaymentError(
                f"Payment of {amount} exceeds remaining balance of {total - paid}"
            )

        session = (
            cash_service.get_active_session(principal.user_id)
            or cash_service.get_any_active_session()
        )
        if not session:
            raise StateError("No active cash session. Open a cash session before accepting payments.")

        payment = Payment(
            order_id=order.id,
            user_id=principal.user_id,
            cash_session_id=session.id,
            amount=amount,
            method=method,
            reference=reference,
            notes=notes,
            created_at=utcnow(),
        )
        db.session.add(payment)
        db.session.flush()

        is_paid = abs(updated_paid - total) < PAYMENT_TOLERANCE
        if is_paid:
            # Same paid_at IS NULL guard as the claim: set exactly once
            paid_at = utcnow()
            matched = update_if(Order, order.id, {"paid_at": None}, {"paid_at": paid_at, "updated_at": paid_at})
            if matched == 0:
                raise ConcurrencyError("Order was paid concurrently. Please refresh.")

    audit_service.log_payment(principal, order.id, amount, method)
    if is_paid:
        audit_service.emit(principal, AuditAction.PAYMENT, order_id=order.id, details="Order marked as paid")

    order = load_order(order.id)
    return {
        "payment": payment.to_dict(),
        "order": present_order(order, principal),
        "total": total,
        "paid": updated_paid,
        "remaining": total - updated_paid,
        "is_paid": order.paid_at is not None,
    }


# =============================================================================
# READS
# =============================================================================

def get_order_payments(principal, order_id) -> dict:
    """All payments for an order plus the computed balance. Cashier only."""
    current_policy().require(principal, "VIEW_PAYMENTS", "No permission to view payments")
    order = load_order(order_id)
    payments = db.session.query(Payment).filter_by(order_id=order.id).order_by(Payment.id.asc()).all()
    return {
        **_summary(order),
        "payments": [payment.to_dict() for payment in payments],
    }


def get_payment_summary(principal, order_id) -> dict:
    """Balance without payment records. Cashier and waiter; forbidden to kitchen."""
    current_policy().require(principal, "VIEW_PRICES", "No permission to view payment summary")
    order = load_order(order_id)
    summary = _summary(order)
    summary["payments_count"] = db.session.query(func.count(Payment.id)).filter(
        Payment.order_id == order.id
    ).scalar()
    return summary
